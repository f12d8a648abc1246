"""
Wrong options for fallback questions.

Candidates come from key terms of other sentences (and, for definition
questions, from other definitions' predicates). Difficulty only changes the
order in which candidates are preferred:

- easy: unlike the answer (length, leading character, spelling)
- medium: about as long and as salient as the answer
- hard: from neighbouring sentences, sharing a prefix or head word

When the pool runs dry the remaining slots are filled by perturbing values
already chosen (plural toggle, numeric offset). A draft that still cannot
get three distinct distractors is dropped by returning None.
"""
from __future__ import annotations

import re
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Set

from mcqgen.engine.key_terms import content_tokens
from mcqgen.engine.models import KeyTerm, QuestionDraft

DISTRACTOR_COUNT = 3
NEIGHBOURHOOD = 2
LENGTH_BUCKETS = (4, 8, 14)
PREFIX_CHARS = 4


def option_key(text: str) -> str:
    """Case- and whitespace-insensitive identity of an option text."""
    return " ".join(text.casefold().split())


def _length_bucket(text: str) -> int:
    n = len(text)
    for i, limit in enumerate(LENGTH_BUCKETS):
        if n <= limit:
            return i
    return len(LENGTH_BUCKETS)


def _token_bucket(text: str) -> int:
    return min(len(text.split()), 3)


def _char_class(text: str) -> str:
    c = text[:1]
    if c.isupper():
        return "upper"
    if c.islower():
        return "lower"
    if c.isdigit():
        return "digit"
    return "other"


def _jaccard(set_a: Set[str], b: str) -> float:
    set_b = set(b.lower())
    return len(set_a & set_b) / max(1, len(set_a | set_b))


def _prefix_matcher(answer: str) -> Callable[[str], bool]:
    """Does a candidate share a head word or a word prefix with `answer`?"""
    words_a = answer.lower().split()
    head = words_a[-1] if words_a else None
    prefixes = {w[:PREFIX_CHARS] for w in words_a if len(w) >= PREFIX_CHARS}

    def shares(text: str) -> bool:
        words_b = text.lower().split()
        if head is None or not words_b:
            return False
        if words_b[-1] == head:
            return True
        return any(w[:PREFIX_CHARS] in prefixes for w in words_b if len(w) >= PREFIX_CHARS)
    return shares


def _easy_key(draft: QuestionDraft) -> Callable[[KeyTerm], tuple]:
    bucket = _length_bucket(draft.answer)
    char_class = _char_class(draft.answer)
    letters = set(draft.answer.lower())

    def key(c: KeyTerm) -> tuple:
        return (
            _length_bucket(c.text) == bucket,
            _char_class(c.text) == char_class,
            round(_jaccard(letters, c.text), 6),
            c.sentence_index,
            c.position,
        )
    return key


def _medium_key(draft: QuestionDraft) -> Callable[[KeyTerm], tuple]:
    bucket = _token_bucket(draft.answer)
    rank = draft.term.rank
    score = draft.term.score

    def key(c: KeyTerm) -> tuple:
        return (
            _token_bucket(c.text) != bucket,
            abs(c.rank - rank),
            round(abs(c.score - score), 6),
            c.sentence_index,
            c.position,
        )
    return key


def _hard_key(draft: QuestionDraft) -> Callable[[KeyTerm], tuple]:
    shares = _prefix_matcher(draft.answer)
    anchor = draft.sentence.index

    def key(c: KeyTerm) -> tuple:
        distance = abs(c.sentence_index - anchor)
        return (
            distance if distance <= NEIGHBOURHOOD else NEIGHBOURHOOD + 1,
            not shares(c.text),
            -c.score,
            c.sentence_index,
            c.position,
        )
    return key


POLICIES: Dict[str, Callable[[QuestionDraft], Callable[[KeyTerm], tuple]]] = {
    "easy": _easy_key,
    "medium": _medium_key,
    "hard": _hard_key,
}


TokenIndex = Dict[str, Set[str]]


def token_index(*pools: Sequence[KeyTerm]) -> TokenIndex:
    """Content tokens of every candidate text, computed once per generation call."""
    index: TokenIndex = {}
    for pool in pools:
        for c in pool:
            if c.text not in index:
                index[c.text] = content_tokens(c.text)
    return index


def _tokens_of(text: str, tokens: TokenIndex) -> Set[str]:
    found = tokens.get(text)
    if found is None:
        found = tokens[text] = content_tokens(text)
    return found


def _eligible(draft: QuestionDraft, pool: Sequence[KeyTerm], tokens: TokenIndex) -> List[KeyTerm]:
    answer_key = option_key(draft.answer)
    blocked = _tokens_of(draft.answer, tokens) | _tokens_of(draft.term.text, tokens)
    out = []
    for c in pool:
        if c.sentence_index == draft.sentence.index:
            continue
        if not c.text.strip() or option_key(c.text) == answer_key:
            continue
        if _tokens_of(c.text, tokens) & blocked:
            continue
        out.append(c)
    return out


def _pick(ordered: Sequence[KeyTerm], taken: List[str], strict: bool, tokens: TokenIndex) -> None:
    keys = {option_key(t) for t in taken}
    used: Set[str] = set()
    for t in taken:
        used |= _tokens_of(t, tokens)
    for c in ordered:
        if len(taken) >= DISTRACTOR_COUNT:
            return
        k = option_key(c.text)
        if k in keys:
            continue
        found = _tokens_of(c.text, tokens)
        if strict and found & used:
            continue
        taken.append(c.text)
        keys.add(k)
        used |= found


def _toggle_plural(text: str) -> Optional[str]:
    words = text.split()
    if not words or not words[-1].isalpha():
        return None
    last = words[-1]
    low = last.lower()
    if low.endswith("sis"):
        last = last[:-2] + "es"
    elif low.endswith("ies") and len(low) > 4:
        last = last[:-3] + "y"
    elif low.endswith(("sses", "xes", "zes", "ches", "shes")):
        last = last[:-2]
    elif low.endswith("us") and len(low) > 4:
        last = last[:-2] + "i"
    elif low.endswith("s") and not low.endswith("ss"):
        last = last[:-1]
    elif low.endswith("y") and len(low) > 2 and low[-2] not in "aeiou":
        last = last[:-1] + "ies"
    elif low.endswith(("s", "x", "z", "ch", "sh")):
        last = last + "es"
    else:
        last = last + "s"
    return " ".join(words[:-1] + [last])


def _numeric_offsets(text: str) -> Iterator[str]:
    matches = list(re.finditer(r"\d+", text))
    if not matches:
        return
    m = matches[-1]
    value = int(m.group(0))
    for changed in (value + 1, value * 10 if value else 10, max(value - 1, 0)):
        yield text[:m.start()] + str(changed) + text[m.end():]


def perturbations(text: str) -> Iterator[str]:
    plural = _toggle_plural(text)
    if plural:
        yield plural
    yield from _numeric_offsets(text)


def _fill_by_perturbation(answer: str, taken: List[str]) -> None:
    keys = {option_key(answer)} | {option_key(t) for t in taken}
    for seed in list(taken) + [answer]:
        for variant in perturbations(seed):
            if len(taken) >= DISTRACTOR_COUNT:
                return
            k = option_key(variant)
            if variant.strip() and k not in keys:
                taken.append(variant)
                keys.add(k)


def generate_distractors(
    draft: QuestionDraft,
    all_terms: Sequence[KeyTerm],
    difficulty: str,
    predicates: Sequence[KeyTerm] = (),
    tokens: Optional[TokenIndex] = None,
) -> Optional[List[str]]:
    """Exactly three distractors for `draft`, or None when that is impossible.

    `tokens` is a shared `token_index` of the pools; callers completing many
    drafts against the same pool should build it once and pass it in.
    """
    if tokens is None:
        tokens = token_index(all_terms, predicates)
    sort_key = POLICIES.get(difficulty, _medium_key)(draft)
    groups = [sorted(_eligible(draft, all_terms, tokens), key=sort_key)]
    if draft.strategy == "definition":
        groups.insert(0, sorted(_eligible(draft, predicates, tokens), key=sort_key))

    taken: List[str] = []
    for strict in (True, False):
        for ordered in groups:
            _pick(ordered, taken, strict, tokens)
    if len(taken) < DISTRACTOR_COUNT:
        _fill_by_perturbation(draft.answer, taken)
    if len(taken) < DISTRACTOR_COUNT:
        return None
    return taken[:DISTRACTOR_COUNT]


def definition_pool(drafts: Sequence[QuestionDraft]) -> List[KeyTerm]:
    """Predicates of definition drafts, usable as distractors for each other."""
    return [
        KeyTerm(
            text=d.answer,
            norm=option_key(d.answer),
            score=d.term.score,
            sentence_index=d.sentence.index,
            position=0,
            rank=d.term.rank,
        )
        for d in drafts
        if d.strategy == "definition"
    ]
