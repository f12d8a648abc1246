from __future__ import annotations

import hashlib
import random
from typing import Iterable, List, Sequence, Tuple

from mcqgen.engine.models import QuestionDraft
from mcqgen.schemas import OPTION_IDS, MCQItem, MCQOption


def shuffle_seed(index: int, draft: QuestionDraft, distractors: Sequence[str]) -> int:
    """Seed from the item position and its content only."""
    material = "\x1f".join([str(index), draft.stem, draft.answer, *distractors])
    return int.from_bytes(hashlib.sha256(material.encode("utf-8")).digest()[:8], "big")


def assemble(draft: QuestionDraft, distractors: Sequence[str], index: int, difficulty: str) -> MCQItem:
    """Build the final item for output position `index` (0-based)."""
    texts: List[tuple] = [(draft.answer, True)] + [(d, False) for d in distractors]
    random.Random(shuffle_seed(index, draft, distractors)).shuffle(texts)
    options = [
        MCQOption(id=OPTION_IDS[i], text=text, correct=correct)
        for i, (text, correct) in enumerate(texts)
    ]
    return MCQItem(
        id=f"q_{index + 1}",
        question=draft.stem,
        options=options,
        explanation=draft.explanation,
        difficulty=difficulty,
    )


def assemble_all(
    completed: Iterable[Tuple[QuestionDraft, Sequence[str]]], count: int, difficulty: str
) -> List[MCQItem]:
    """Assemble at most `count` items, numbering them by output position. Never pads."""
    items: List[MCQItem] = []
    for draft, distractors in completed:
        if len(items) >= count:
            break
        items.append(assemble(draft, distractors, len(items), difficulty))
    return items
