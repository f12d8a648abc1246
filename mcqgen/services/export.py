"""
Serialize MCQ sets for download: CSV (one row per option) or JSON.
"""
import csv
import io
import json
from typing import List

from mcqgen.schemas import MCQItem

CSV_HEADER = ["question", "option_id", "option_text", "correct", "explanation", "difficulty"]


def export_csv(items: List[MCQItem]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for item in items:
        for option in item.options:
            writer.writerow([
                item.question,
                option.id,
                option.text,
                "true" if option.correct else "false",
                item.explanation or "",
                item.difficulty,
            ])
    return buf.getvalue()


def export_json(items: List[MCQItem], difficulty: str) -> str:
    payload = {
        "difficulty": difficulty,
        "items": [item.model_dump() for item in items],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)
