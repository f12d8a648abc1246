"""
Question stems for the fallback generator.

Two strategies:
- definition: "X is Y" becomes "What is X?" with Y as the answer
- cloze: the key term is blanked out of the sentence
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional

from mcqgen.engine.key_terms import content_tokens
from mcqgen.engine.models import KeyTerm, QuestionDraft, Sentence

BLANK = "_____"
CLOZE_PREFIX = "Which of the following best completes the statement:"
MAX_PREDICATE_WORDS = 12
MIN_PREDICATE_WORDS = 2

# Longest copulas first so "is defined as" wins over "is"
COPULA_QUESTIONS = (
    ("can be defined as", "How can {term} be defined?"),
    ("is defined as", "What is {term}?"),
    ("are defined as", "What are {term}?"),
    ("refers to", "What does {term} refer to?"),
    ("refer to", "What do {term} refer to?"),
    ("means", "What does {term} mean?"),
    ("denotes", "What does {term} denote?"),
    ("is", "What is {term}?"),
    ("are", "What are {term}?"),
    ("was", "What was {term}?"),
    ("were", "What were {term}?"),
)
COPULA_RE = "|".join(re.escape(c) for c, _ in COPULA_QUESTIONS)
QUESTION_FOR = dict(COPULA_QUESTIONS)
# Shortest subject wins, so the first copula in the sentence splits it
DEFINITION_RE = re.compile(
    r"^(?:(?P<article>the|a|an)\s+)?(?P<subject>.+?)\s+(?P<copula>" + COPULA_RE
    + r")\s+(?P<predicate>[^;:?!]+)",
    re.I,
)


def _term_pattern(term: KeyTerm) -> str:
    return r"(?<!\w)" + r"\s+".join(re.escape(w) for w in term.text.split()) + r"(?!\w)"


def _key(text: str) -> str:
    return " ".join(text.casefold().split())


def _leaks(answer: str, stem: str) -> bool:
    pattern = r"(?<!\w)" + re.escape(_key(answer)) + r"(?!\w)"
    return re.search(pattern, _key(stem)) is not None


def _trim_predicate(predicate: str) -> Optional[str]:
    predicate = predicate.strip().rstrip(".;:,!?").strip()
    words = predicate.split()
    if len(words) > MAX_PREDICATE_WORDS and "," in predicate:
        predicate = predicate.split(",", 1)[0].strip()
        words = predicate.split()
    if not MIN_PREDICATE_WORDS <= len(words) <= MAX_PREDICATE_WORDS:
        return None
    return predicate


def definition_draft(sentence: Sentence, term: KeyTerm) -> Optional[QuestionDraft]:
    """Rewrite "<term> is <predicate>" as a direct question, if the sentence reads that way."""
    m = DEFINITION_RE.match(sentence.text)
    if not m:
        return None
    return _definition_from_match(sentence, term, m)


def _definition_from_match(sentence: Sentence, term: KeyTerm, m: re.Match) -> Optional[QuestionDraft]:
    if _key(m.group("subject")) != _key(term.text):
        return None
    predicate = _trim_predicate(m.group("predicate"))
    if predicate is None:
        return None
    subject = term.text
    if m.group("article"):
        subject = m.group("article").lower() + " " + subject
    stem = QUESTION_FOR[m.group("copula").lower()].format(term=subject)
    if _leaks(predicate, stem) or not content_tokens(predicate):
        return None
    return QuestionDraft(
        sentence=sentence,
        term=term,
        stem=stem,
        answer=predicate,
        strategy="definition",
        explanation=sentence.text,
    )


def cloze_draft(sentence: Sentence, term: KeyTerm) -> Optional[QuestionDraft]:
    blanked, count = re.subn(_term_pattern(term), BLANK, sentence.text, flags=re.I)
    if count == 0:
        return None
    # Need enough context left around the blank
    if len(content_tokens(blanked)) < 2:
        return None
    stem = f"{CLOZE_PREFIX} {blanked}"
    if _leaks(term.text, stem):
        return None
    return QuestionDraft(
        sentence=sentence,
        term=term,
        stem=stem,
        answer=term.text,
        strategy="cloze",
        explanation=sentence.text,
    )


def synthesize(sentence: Sentence, term: KeyTerm) -> Optional[QuestionDraft]:
    return definition_draft(sentence, term) or cloze_draft(sentence, term)


def _best_draft(sentence: Sentence, terms: List[KeyTerm]) -> Optional[QuestionDraft]:
    m = DEFINITION_RE.match(sentence.text)
    if m:
        for term in terms:
            draft = _definition_from_match(sentence, term, m)
            if draft is not None:
                return draft
    for term in terms:
        draft = cloze_draft(sentence, term)
        if draft is not None:
            return draft
    return None


def synthesize_all(sentences: List[Sentence], ranked: Dict[int, List[KeyTerm]]) -> List[QuestionDraft]:
    """One draft per sentence, deduplicated by stem, in document order."""
    by_stem: Dict[str, QuestionDraft] = {}
    for sentence in sentences:
        draft = _best_draft(sentence, ranked.get(sentence.index, []))
        if draft is None:
            continue
        key = _key(draft.stem)
        kept = by_stem.get(key)
        if kept is None or draft.term.score > kept.term.score:
            by_stem[key] = draft
    return sorted(by_stem.values(), key=lambda d: d.sentence.index)
