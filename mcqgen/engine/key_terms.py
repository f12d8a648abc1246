"""
Key-term scoring for the fallback generator.

Candidates are single words and windows of up to three consecutive content
words. Each is scored by inverse sentence frequency, boosted for proper nouns,
acronyms, longer (more technical) words and multi-word phrases. A phrase is
only a candidate when it recurs in the document or is a proper-noun phrase.
"""
from __future__ import annotations

import math
import re
from typing import Dict, List, Set, Tuple

from mcqgen.engine.models import KeyTerm, Sentence

MAX_PHRASE_TOKENS = 3
MIN_TOKEN_CHARS = 3
CAPITAL_BONUS = 1.5
PHRASE_BONUS = {1: 1.0, 2: 1.1, 3: 1.15}

# Letters and digits in any script; underscores are not word characters here
WORD_RE = re.compile(r"[^\W_]+(?:['\-][^\W_]+)*")

STOPWORDS = frozenset("""
a an the and or but if then else while with without within into onto from to of in on at by for as
that this these those there here which who whom whose what when where why how
is are was were be been being have has had do does did done can could should would may might will shall must
it its itself himself herself themselves we you they he she i their our your his her them us me my mine
about above below under over between among per via etc such than so not no nor also more most less least
very much many few each either neither both other another some any all only own same too just
because however therefore thus hence whereas although though since until unless upon onto
one two three first second new used use using uses called known often usually generally typically
""".split())


def _tokens(text: str) -> List[Tuple[str, int, int]]:
    return [(m.group(0), m.start(), m.end()) for m in WORD_RE.finditer(text)]


def _is_content(token: str) -> bool:
    low = token.lower()
    if low in STOPWORDS:
        return False
    if not any(c.isalpha() for c in token):
        return False
    if token.isupper() and len(token) >= 2:
        return True
    return len(token) >= MIN_TOKEN_CHARS


def _is_capitalized(token: str) -> bool:
    return token[:1].isupper()


def content_tokens(text: str) -> Set[str]:
    """Lowercased content words of a string, used for overlap checks."""
    return {tok.lower() for tok, _, _ in _tokens(text) if _is_content(tok)}


def _proper_forms(sentences: List[Sentence]) -> Set[str]:
    """Words written capitalized somewhere other than a sentence start."""
    proper = set()
    for s in sentences:
        for i, (tok, _, _) in enumerate(_tokens(s.text)):
            if i > 0 and _is_capitalized(tok) and _is_content(tok):
                proper.add(tok.lower())
    return proper


def _runs(text: str) -> List[List[Tuple[int, str, int, int]]]:
    """Runs of consecutive content tokens separated only by spaces."""
    runs: List[List[Tuple[int, str, int, int]]] = []
    current: List[Tuple[int, str, int, int]] = []
    prev_end = None
    for i, (tok, start, end) in enumerate(_tokens(text)):
        contiguous = prev_end is not None and text[prev_end:start].strip() == ""
        if _is_content(tok):
            if current and not contiguous:
                runs.append(current)
                current = []
            current.append((i, tok, start, end))
        elif current:
            runs.append(current)
            current = []
        prev_end = end
    if current:
        runs.append(current)
    return runs


def _surface(text: str, first_index: int, proper: Set[str]) -> str:
    # Undo sentence-start capitalization for ordinary words
    head, *rest = text.split()
    if any(_is_capitalized(w) for w in rest):
        return text  # "Alpha Beta" reads as a name, keep it whole
    if first_index == 0 and head.lower() not in proper and head[:1].isupper() and head[1:].islower():
        return text[:1].lower() + text[1:]
    return text


def sentence_frequencies(sentences: List[Sentence]) -> Dict[str, int]:
    df: Dict[str, int] = {}
    for s in sentences:
        for tok in content_tokens(s.text):
            df[tok] = df.get(tok, 0) + 1
    return df


def _score(words: List[str], idf: Dict[str, float], proper: Set[str]) -> float:
    lows = [w.lower() for w in words]
    base = sum(idf[w] for w in lows) / len(lows)
    is_proper = any(low in proper or (word.isupper() and len(word) >= 2) for word, low in zip(words, lows))
    capital = CAPITAL_BONUS if is_proper else 1.0
    avg_len = sum(len(w) for w in lows) / len(lows)
    length = 1.0 + min(avg_len, 12) / 24.0
    return round(base * capital * length * PHRASE_BONUS[len(words)], 6)


def _windows(sentence: Sentence) -> List[Tuple[str, List[str], int, int, int]]:
    """(norm, words, first token index, start, end) for every candidate window."""
    out = []
    for run in _runs(sentence.text):
        for size in range(1, MAX_PHRASE_TOKENS + 1):
            for j in range(len(run) - size + 1):
                window = run[j:j + size]
                words = [w for _, w, _, _ in window]
                out.append((" ".join(words).lower(), words, window[0][0], window[0][2], window[-1][3]))
    return out


def _keep_phrase(words: List[str], norm: str, phrase_df: Dict[str, int], proper: Set[str]) -> bool:
    # Multi-word windows must recur or read as a proper-noun phrase
    if len(words) == 1:
        return True
    if phrase_df.get(norm, 0) >= 2:
        return True
    return all(w.lower() in proper or w.isupper() for w in words)


def extract(sentences: List[Sentence]) -> Dict[int, List[KeyTerm]]:
    """Rank candidate key terms for every sentence.

    Returns a mapping of sentence index to its terms, best first. Order is
    total: score descending, then first occurrence, then text.
    """
    n = len(sentences)
    df = sentence_frequencies(sentences)
    idf = {tok: math.log((1 + n) / (1 + count)) + 1.0 for tok, count in df.items()}
    proper = _proper_forms(sentences)

    windows = {s.index: _windows(s) for s in sentences}
    phrase_df: Dict[str, int] = {}
    for items in windows.values():
        for norm in {w[0] for w in items if len(w[1]) > 1}:
            phrase_df[norm] = phrase_df.get(norm, 0) + 1

    ranked: Dict[int, List[KeyTerm]] = {}
    for s in sentences:
        seen: Dict[str, KeyTerm] = {}
        for norm, words, first_index, start, end in windows[s.index]:
            if norm in seen or not _keep_phrase(words, norm, phrase_df, proper):
                continue
            seen[norm] = KeyTerm(
                text=_surface(s.text[start:end], first_index, proper),
                norm=norm,
                score=_score(words, idf, proper),
                sentence_index=s.index,
                position=start,
            )
        ordered = sorted(seen.values(), key=lambda t: (-t.score, t.position, t.norm))
        ranked[s.index] = [
            KeyTerm(t.text, t.norm, t.score, t.sentence_index, t.position, rank)
            for rank, t in enumerate(ordered)
        ]
    return ranked


def all_terms(ranked: Dict[int, List[KeyTerm]]) -> List[KeyTerm]:
    """Document-wide pool, ordered by sentence then rank."""
    pool: List[KeyTerm] = []
    for index in sorted(ranked):
        pool.extend(ranked[index])
    return pool
