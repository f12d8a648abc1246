from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Sentence:
    index: int
    text: str


@dataclass(frozen=True)
class KeyTerm:
    text: str
    norm: str
    score: float
    sentence_index: int
    position: int
    rank: int = 0


@dataclass(frozen=True)
class QuestionDraft:
    sentence: Sentence
    term: KeyTerm
    stem: str
    answer: str
    strategy: str  # "cloze" or "definition"
    explanation: Optional[str] = None
