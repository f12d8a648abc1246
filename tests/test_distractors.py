"""
Tests for distractor selection
"""
from unittest.mock import patch

import pytest

from mcqgen.engine.distractors import (
    _toggle_plural, definition_pool, generate_distractors, option_key, token_index,
)
from mcqgen.engine.key_terms import content_tokens
from mcqgen.engine.models import KeyTerm, QuestionDraft, Sentence


def _term(text, sentence_index, score=1.0, rank=0):
    return KeyTerm(
        text=text, norm=text.lower(), score=score,
        sentence_index=sentence_index, position=0, rank=rank,
    )


def _draft(answer, sentence_index=0, strategy="cloze", score=1.0, rank=0):
    sentence = Sentence(sentence_index, f"Sentence about {answer} number {sentence_index}.")
    return QuestionDraft(
        sentence=sentence,
        term=_term(answer, sentence_index, score, rank),
        stem=f"Which of the following best completes the statement: _____ #{sentence_index}",
        answer=answer,
        strategy=strategy,
    )


POOL = [
    _term("glucose", 0), _term("insulin", 0, rank=1), _term("pancreas", 0, rank=2),
    _term("ribosome", 6), _term("nucleus", 6, rank=1), _term("vacuole", 6, rank=2),
    _term("cytoplasm", 9), _term("chloroplast", 9, rank=1), _term("ATP", 9, rank=2),
]


class TestSelection:
    def test_three_distinct_distractors(self):
        """Exactly three, none equal to the answer or each other"""
        draft = _draft("mitochondria", 5)
        distractors = generate_distractors(draft, POOL, "medium")
        assert len(distractors) == 3
        keys = {option_key(d) for d in distractors}
        assert len(keys) == 3
        assert option_key("mitochondria") not in keys

    def test_same_sentence_terms_excluded(self):
        """Terms from the answer's own sentence are never used"""
        draft = _draft("mitochondria", 6)
        distractors = generate_distractors(draft, POOL, "hard")
        assert not {"ribosome", "nucleus", "vacuole"} & set(distractors)

    def test_overlapping_terms_excluded(self):
        """Candidates sharing a content word with the answer are skipped"""
        pool = POOL + [_term("plant cell", 1), _term("cell wall", 2)]
        distractors = generate_distractors(_draft("animal cell", 5), pool, "medium")
        assert all("cell" not in d for d in distractors)

    def test_hard_prefers_neighbours(self):
        """Hard draws from sentences within two of the answer"""
        distractors = generate_distractors(_draft("mitochondria", 5), POOL, "hard")
        assert set(distractors) == {"ribosome", "nucleus", "vacuole"}

    def test_medium_prefers_similar_salience(self):
        """Medium keeps the word count of the answer and a nearby rank"""
        pool = [
            _term("glucose", 0, rank=0), _term("plasma membrane", 1, rank=2),
            _term("insulin", 3, rank=5), _term("ribosome", 6, rank=2),
            _term("nucleus", 7, rank=3), _term("vacuole", 8, rank=1),
        ]
        distractors = generate_distractors(_draft("mitochondria", 5, rank=2), pool, "medium")
        assert set(distractors) == {"ribosome", "nucleus", "vacuole"}
        assert "plasma membrane" not in distractors

    def test_easy_prefers_unlike_candidates(self):
        """Easy picks options whose length differs from the answer first"""
        distractors = generate_distractors(_draft("mitochondria", 5), POOL, "easy")
        assert "ATP" in distractors
        assert "glucose" in distractors

    def test_deterministic(self):
        """Same draft and pool give the same distractors"""
        draft = _draft("mitochondria", 5)
        assert generate_distractors(draft, POOL, "medium") == generate_distractors(draft, POOL, "medium")

    def test_definition_prefers_predicates(self):
        """Definition questions draw from other definitions first"""
        drafts = [
            _draft("a sugar made during photosynthesis", 1, "definition"),
            _draft("an organelle that digests waste", 2, "definition"),
            _draft("a protein that speeds up reactions", 3, "definition"),
            _draft("the control centre of the cell", 4, "definition"),
        ]
        predicates = definition_pool(drafts)
        distractors = generate_distractors(drafts[3], POOL, "medium", predicates)
        assert set(distractors) == {d.answer for d in drafts[:3]}


class TestTokenIndex:
    def test_pool_is_tokenized_once_per_call(self):
        """A shared index leaves only the answers to tokenize"""
        drafts = [_draft(a, i) for i, a in enumerate(["mitochondria", "lysosome", "centriole"], start=2)]
        tokens = token_index(POOL)
        with patch("mcqgen.engine.distractors.content_tokens", wraps=content_tokens) as counted:
            for draft in drafts:
                generate_distractors(draft, POOL, "hard", tokens=tokens)
        assert counted.call_count <= len(drafts)

    def test_index_does_not_change_the_choice(self):
        """Same distractors with or without a prepared index"""
        draft = _draft("mitochondria", 5)
        for difficulty in ("easy", "medium", "hard"):
            assert generate_distractors(draft, POOL, difficulty, tokens=token_index(POOL)) == \
                generate_distractors(draft, POOL, difficulty)


class TestPerturbation:
    def test_numeric_answer_is_perturbed(self):
        """An empty pool falls back to numeric variants of the answer"""
        distractors = generate_distractors(_draft("Apollo 11"), [], "medium")
        assert distractors == ["Apollo 12", "Apollo 110", "Apollo 10"]

    def test_dropped_when_impossible(self):
        """None when three distinct options cannot be found"""
        assert generate_distractors(_draft("enzyme"), [], "medium") is None

    @pytest.mark.parametrize("word,expected", [
        ("enzyme", "enzymes"),
        ("cells", "cell"),
        ("analysis", "analyses"),
        ("nucleus", "nuclei"),
        ("body", "bodies"),
        ("bodies", "body"),
        ("matrix", "matrixes"),
        ("red blood cell", "red blood cells"),
    ])
    def test_toggle_plural(self, word, expected):
        """Plural toggling on the last word"""
        assert _toggle_plural(word) == expected

    def test_toggle_plural_needs_a_word(self):
        """Numbers are not pluralized"""
        assert _toggle_plural("1953") is None
