"""
Tests for quiz scoring and export
"""
import csv
import io
import json

from mcqgen.schemas import MCQItem, MCQOption
from mcqgen.services.export import CSV_HEADER, export_csv, export_json
from mcqgen.services.scoring import score_answers


def _item(n, correct="B", question=None):
    return MCQItem(
        id=f"q_{n}",
        question=question or f"Question {n}?",
        options=[MCQOption(id=c, text=f"answer {n}{c}", correct=c == correct) for c in "ABCD"],
        explanation=f"Explanation {n}.",
        difficulty="medium",
    )


class TestScoring:
    def test_counts_correct_choices(self):
        """Only the correct option id scores"""
        items = [_item(1), _item(2, correct="D"), _item(3)]
        result = score_answers(items, {"q_1": "B", "q_2": "A", "q_3": "B"})
        assert result.correct == 2
        assert result.total == 3
        assert [r.is_correct for r in result.results] == [True, False, True]
        assert result.results[1].correct_option == "D"

    def test_unanswered_and_unknown(self):
        """Missing answers and bogus option ids count as wrong"""
        result = score_answers([_item(1), _item(2)], {"q_2": "Z"})
        assert result.correct == 0
        assert result.results[0].chosen is None
        assert result.results[1].chosen == "Z"

    def test_empty_quiz(self):
        """No items, no score"""
        result = score_answers([], {})
        assert (result.correct, result.total) == (0, 0)


class TestExport:
    def test_csv_one_row_per_option(self):
        """Header plus four rows per item"""
        rows = list(csv.reader(io.StringIO(export_csv([_item(1), _item(2)]))))
        assert rows[0] == CSV_HEADER
        assert len(rows) == 1 + 8
        assert rows[2] == ["Question 1?", "B", "answer 1B", "true", "Explanation 1.", "medium"]
        assert rows[1][3] == "false"

    def test_csv_quotes_commas(self):
        """Fields with commas survive a round trip"""
        content = export_csv([_item(1, question="Which, of these, is right?")])
        rows = list(csv.reader(io.StringIO(content)))
        assert rows[1][0] == "Which, of these, is right?"

    def test_csv_empty(self):
        """An empty set is just the header"""
        assert export_csv([]) == ",".join(CSV_HEADER) + "\n"

    def test_json(self):
        """JSON export carries the difficulty and full items"""
        data = json.loads(export_json([_item(1)], "hard"))
        assert data["difficulty"] == "hard"
        assert data["items"][0]["id"] == "q_1"
        assert len(data["items"][0]["options"]) == 4
        assert data["items"][0]["options"][1]["correct"] is True
