"""
Deterministic MCQ generation, used when the primary model is unavailable.

normalize -> extract key terms -> synthesize drafts -> distractors -> assemble.
Pure and synchronous: same input, same output, no I/O.
"""
from __future__ import annotations

from typing import Iterator, List, Sequence, Tuple

from mcqgen.engine.assembler import assemble_all
from mcqgen.engine.distractors import definition_pool, generate_distractors, token_index
from mcqgen.engine.key_terms import all_terms, extract
from mcqgen.engine.models import KeyTerm, QuestionDraft
from mcqgen.engine.normalizer import normalize
from mcqgen.engine.synthesizer import synthesize_all
from mcqgen.schemas import MCQItem
from mcqgen.services.logging import get_logger, log_performance

logger = get_logger(__name__)


def _complete(
    drafts: Sequence[QuestionDraft], pool: Sequence[KeyTerm], difficulty: str
) -> Iterator[Tuple[QuestionDraft, List[str]]]:
    predicates = definition_pool(drafts)
    tokens = token_index(pool, predicates)
    for draft in drafts:
        distractors = generate_distractors(draft, pool, difficulty, predicates, tokens)
        if distractors is None:
            logger.debug("draft_dropped", reason="insufficient_distractors", sentence=draft.sentence.index)
            continue
        yield draft, distractors


@log_performance("fallback_generate_mcqs")
def fallback_generate_mcqs(text: str, count: int, difficulty: str = "medium") -> List[MCQItem]:
    """Generate up to `count` MCQs from `text` without any external service.

    Returns an empty list when the text has no usable sentences or key terms.
    """
    sentences = normalize(text)
    if not sentences:
        logger.info("fallback_input_too_sparse", reason="no_sentences")
        return []

    ranked = extract(sentences)
    pool = all_terms(ranked)
    if not pool:
        logger.info("fallback_input_too_sparse", reason="no_key_terms", sentences=len(sentences))
        return []

    drafts = synthesize_all(sentences, ranked)
    items = assemble_all(_complete(drafts, pool, difficulty), count, difficulty)
    logger.info(
        "fallback_generated",
        sentences=len(sentences),
        drafts=len(drafts),
        items=len(items),
        requested=count,
        difficulty=difficulty,
    )
    return items
