"""
Primary/fallback decision for MCQ generation.

One attempt at the external model. Its output is validated and normalized to
the MCQItem shape; if that yields fewer than min(3, count) items, or the
attempt failed in any way, the deterministic engine runs on the same input.
Exactly one source serves each request.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from pydantic import ValidationError

from mcqgen import config
from mcqgen.engine.distractors import option_key
from mcqgen.engine.pipeline import fallback_generate_mcqs
from mcqgen.errors import GenerationCancelled
from mcqgen.schemas import OPTION_COUNT, OPTION_IDS, GenerationConfig, MCQItem, MCQOption
from mcqgen.services.llm import PrimarySuccess, request_mcqs
from mcqgen.services.logging import get_logger
from mcqgen.services.monitoring import GENERATION_REQUESTS, ITEMS_GENERATED, PRIMARY_FAILURES

logger = get_logger(__name__)

MIN_PRIMARY_ITEMS = 3
# How often a waiting request checks whether its caller is still there
CANCEL_POLL_SECONDS = 0.25

CancelCheck = Callable[[], Awaitable[bool]]


@dataclass(frozen=True)
class GenerationResult:
    source: str
    items: List[MCQItem]
    primary_outcome: Optional[str] = None


def _option_fields(option) -> Optional[tuple]:
    if isinstance(option, dict):
        return str(option.get("text") or "").strip(), option.get("correct") is True
    if isinstance(option, str):
        return option.strip(), False
    return None


def normalize_record(record: dict, position: int, difficulty: str) -> Optional[MCQItem]:
    """Coerce one model record into an MCQItem, or None when it cannot be salvaged.

    Ids are reassigned by position; only the first correct flag counts; when the
    model sent more than four options the correct one is always kept.
    """
    question = str(record.get("question") or "").strip()
    raw_options = record.get("options")
    if not question or not isinstance(raw_options, list):
        return None

    texts: List[str] = []
    correct_index = None
    seen = set()
    for option in raw_options:
        fields = _option_fields(option)
        if fields is None:
            continue
        text, correct = fields
        key = option_key(text)
        if not text or key in seen:
            continue
        seen.add(key)
        if correct and correct_index is None:
            correct_index = len(texts)
        texts.append(text)

    if correct_index is None:
        # Older {question, options, answer} replies name the answer instead of flagging it
        answer = option_key(str(record.get("answer") or ""))
        if answer:
            correct_index = next((i for i, t in enumerate(texts) if option_key(t) == answer), None)
    if correct_index is None or len(texts) < OPTION_COUNT:
        return None

    if correct_index >= OPTION_COUNT:
        others = [t for i, t in enumerate(texts) if i != correct_index][:OPTION_COUNT - 1]
        texts = others + [texts[correct_index]]
        correct_index = OPTION_COUNT - 1
    texts = texts[:OPTION_COUNT]

    explanation = str(record.get("explanation") or "").strip() or None
    try:
        return MCQItem(
            id=f"q_{position}",
            question=question,
            options=[
                MCQOption(id=OPTION_IDS[i], text=t, correct=i == correct_index)
                for i, t in enumerate(texts)
            ],
            explanation=explanation,
            difficulty=difficulty,
        )
    except ValidationError:
        return None


def normalize_primary_items(records: List[dict], gen_config: GenerationConfig) -> List[MCQItem]:
    items: List[MCQItem] = []
    for record in records:
        if len(items) >= gen_config.count:
            break
        if not isinstance(record, dict):
            continue
        item = normalize_record(record, len(items) + 1, gen_config.difficulty)
        if item is not None:
            items.append(item)
    return items


def _record(result: GenerationResult) -> GenerationResult:
    GENERATION_REQUESTS.labels(source=result.source).inc()
    ITEMS_GENERATED.labels(source=result.source).inc(len(result.items))
    if not result.items:
        logger.info("generation_empty", source=result.source)
    return result


async def _attempt_primary(text: str, gen_config: GenerationConfig) -> tuple:
    """(items or None, outcome) for the single primary attempt."""
    try:
        result = await request_mcqs(text, gen_config)
        if not isinstance(result, PrimarySuccess):
            logger.warning("primary_failed", reason=result.reason, error=result.error)
            return None, result.reason
        items = normalize_primary_items(result.records, gen_config)
    except Exception as e:
        logger.warning("primary_failed", reason="error", error=str(e))
        return None, "error"

    needed = min(MIN_PRIMARY_ITEMS, gen_config.count)
    if len(items) < needed:
        logger.warning("primary_insufficient", items=len(items), needed=needed, records=len(result.records))
        return None, "insufficient"
    return items, result.reason


async def _until_cancelled(is_cancelled: CancelCheck) -> None:
    while not await is_cancelled():
        await asyncio.sleep(CANCEL_POLL_SECONDS)


async def _primary_unless_cancelled(
    text: str, gen_config: GenerationConfig, is_cancelled: Optional[CancelCheck]
) -> tuple:
    """Race the primary attempt against the caller leaving. The loser is cancelled."""
    if is_cancelled is None:
        return await _attempt_primary(text, gen_config)
    primary = asyncio.ensure_future(_attempt_primary(text, gen_config))
    watcher = asyncio.ensure_future(_until_cancelled(is_cancelled))
    try:
        await asyncio.wait({primary, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not primary.done():
            primary.cancel()
    if primary.done() and not primary.cancelled():
        return primary.result()
    watcher.result()  # surfaces errors from is_cancelled itself
    logger.info("generation_cancelled", stage="primary")
    raise GenerationCancelled("caller went away during the primary attempt")


async def generate(
    text: str,
    gen_config: GenerationConfig,
    is_cancelled: Optional[CancelCheck] = None,
) -> GenerationResult:
    """Serve one request from the primary model or, failing that, the fallback engine."""
    outcome = None
    if config.primary_enabled():
        items, outcome = await _primary_unless_cancelled(text, gen_config, is_cancelled)
        if items is not None:
            logger.info("primary_accepted", items=len(items), requested=gen_config.count)
            return _record(GenerationResult(source="primary", items=items, primary_outcome=outcome))
        PRIMARY_FAILURES.labels(reason=outcome).inc()

    if is_cancelled is not None and await is_cancelled():
        logger.info("generation_cancelled", stage="before_fallback")
        raise GenerationCancelled("caller went away before fallback generation")

    items = await asyncio.to_thread(
        fallback_generate_mcqs, text, gen_config.count, gen_config.difficulty
    )
    return _record(GenerationResult(source="fallback", items=items, primary_outcome=outcome))
