"""
Sentence segmentation for the fallback generator.

Turns raw study text into an ordered list of `Sentence` records that are long
and wordy enough to become a question stem.
"""
from __future__ import annotations

import re
from typing import List

from mcqgen.engine.models import Sentence

MIN_SENTENCE_TOKENS = 5
MIN_ALPHA_RATIO = 0.55
HEADING_CAPS_RATIO = 0.6

UNWANTED_INLINE = ("\uf0b7", "\u2022", "\u200b", "\u200c", "\u200d", "\ufeff")
BULLET_PREFIX_RE = re.compile(r"^\s*([\-–—•·●◦\*]|\d+[\.)])\s+")
ONLY_DECOR_RE = re.compile(r"^\s*[-–—=~_+*#]+\s*$")
REF_MARKER_RE = re.compile(r"\[\s*\d+\s*\]")
MULTI_SPACE_RE = re.compile(r"\s+")
SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+(?=[.,;:?!])")
PARAGRAPH_RE = re.compile(r"\n\s*\n")
# Candidate boundary: terminal punctuation, optional closing quotes/brackets, whitespace
BOUNDARY_RE = re.compile(r"[.?!]+[\"')\]]*\s+")
TERMINAL = (".", "?", "!")
# Characters before a "." inspected for an abbreviation
ABBREVIATION_WINDOW = 32

ABBREVIATIONS = frozenset("""
e.g i.e etc vs cf al approx fig figs eq eqs no nos vol pp ch sec dept est
mr mrs ms dr prof sr jr st mt ft inc ltd co corp jan feb mar apr jun jul aug sep sept oct nov dec
""".split())


def _clean(raw_text: str) -> str:
    text = raw_text.replace("\u00ad", "")
    for ch in UNWANTED_INLINE:
        text = text.replace(ch, " ")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"(?<=\w)-\s*\n\s*(?=[a-z])", "", text)  # de-hyphenate across linebreaks
    return text


def _is_abbreviation(chunk: str) -> bool:
    """True when the text ending at a '.' is an abbreviation or an initial."""
    words = chunk.rsplit(None, 1)
    if not words:
        return False
    last = words[-1].lstrip("(\"'").rstrip(".").lower()
    if last in ABBREVIATIONS:
        return True
    # Single-letter initials like "J. Watson"
    return len(last) == 1 and last.isalpha()


def _split_paragraph(paragraph: str) -> List[str]:
    out: List[str] = []
    start = 0
    for m in BOUNDARY_RE.finditer(paragraph):
        end = m.end()
        nxt = paragraph[end:end + 1]
        # A lowercase continuation means the dot was not a sentence end
        if nxt and nxt.islower():
            continue
        punct = m.group(0).rstrip()
        if punct.startswith(".") and len(punct.rstrip("\"')]")) == 1:
            if _is_abbreviation(paragraph[max(start, m.start() - ABBREVIATION_WINDOW):m.start()]):
                continue
        out.append(paragraph[start:end].strip())
        start = end
    tail = paragraph[start:].strip()
    if tail:
        out.append(tail)
    return out


def _segments(text: str) -> List[str]:
    """Paragraphs with heading-like lines split out on their own."""
    segments: List[str] = []
    for block in PARAGRAPH_RE.split(text):
        current: List[str] = []
        for line in block.split("\n"):
            line = BULLET_PREFIX_RE.sub("", line).strip()
            if not line or ONLY_DECOR_RE.match(line):
                continue
            # Short unterminated lines are headings, not wrapped prose
            if not line.endswith(TERMINAL) and (
                len(line.split()) < MIN_SENTENCE_TOKENS or is_heading(line)
            ):
                if current:
                    segments.append(" ".join(current))
                    current = []
                segments.append(line)
                continue
            current.append(line)
        if current:
            segments.append(" ".join(current))
    return segments


def is_heading(sentence: str) -> bool:
    if sentence.endswith(TERMINAL):
        return False
    words = [w for w in sentence.split() if any(c.isalpha() for c in w)]
    if not words:
        return True
    caps = sum(1 for w in words if w[0].isupper())
    return caps / len(words) >= HEADING_CAPS_RATIO


def is_usable(sentence: str) -> bool:
    if len(sentence.split()) < MIN_SENTENCE_TOKENS:
        return False
    letters = sum(c.isalpha() for c in sentence)
    if letters == 0:
        return False
    if letters / max(1, len(sentence)) < MIN_ALPHA_RATIO:
        return False
    if len(sentence) >= 12 and sentence.upper() == sentence:
        return False
    return not is_heading(sentence)


def normalize(text: str) -> List[Sentence]:
    """Split raw text into usable sentences, preserving document order."""
    if not text or not text.strip():
        return []
    sentences: List[Sentence] = []
    for segment in _segments(_clean(text)):
        segment = MULTI_SPACE_RE.sub(" ", segment)
        for raw in _split_paragraph(segment):
            s = MULTI_SPACE_RE.sub(" ", REF_MARKER_RE.sub("", raw)).strip()
            s = SPACE_BEFORE_PUNCT_RE.sub("", s)
            if not is_usable(s):
                continue
            if not s.endswith(TERMINAL):
                s = s + "."
            sentences.append(Sentence(index=len(sentences), text=s))
    return sentences
