from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import List, Union

import openai
from openai import AsyncOpenAI

from mcqgen import config
from mcqgen.errors import PrimaryResponseError
from mcqgen.schemas import GenerationConfig

TEMPERATURE = {"easy": 0.3, "medium": 0.5, "hard": 0.7}
MAX_TOKENS = 2000
# Extra headroom over the SDK timeout before we stop awaiting ourselves
WAIT_SLACK_SECONDS = 5.0

SYSTEM_PROMPT = (
    "You are a precise item writer for competitive exams. Generate high-quality "
    "multiple-choice questions (MCQs) from the provided study text. Requirements:\n"
    "- Questions must be unambiguous and test important concepts\n"
    "- Provide exactly 4 options with one correct answer\n"
    "- Include a short explanation for the correct answer\n"
    "- Tailor difficulty to: {difficulty}\n"
    'Return strictly a JSON object {{"mcqs": [...]}} where each item is '
    '{{"id": string, "question": string, "options": [{{"id": string, "text": string, '
    '"correct": boolean}}], "explanation": string, "difficulty": "easy"|"medium"|"hard"}}'
)


# ─── Primary outcomes ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PrimarySuccess:
    records: List[dict] = field(default_factory=list)
    reason = "success"


@dataclass(frozen=True)
class PrimaryTimeout:
    error: str
    reason = "timeout"


@dataclass(frozen=True)
class PrimaryMalformed:
    error: str
    reason = "malformed"


@dataclass(frozen=True)
class PrimaryUnavailable:
    error: str
    reason = "unavailable"


PrimaryResult = Union[PrimarySuccess, PrimaryTimeout, PrimaryMalformed, PrimaryUnavailable]


def _get_client() -> AsyncOpenAI:
    if not config.OPENAI_API_KEY:
        raise RuntimeError("OPENAI_API_KEY not set")
    # One attempt only; the orchestrator owns the fallback
    return AsyncOpenAI(api_key=config.OPENAI_API_KEY, timeout=config.OPENAI_TIMEOUT, max_retries=0)


def _clean_json_like(content: str) -> str:
    # Strip common code fences ```json ... ``` or ``` ... ```
    text = content.strip()
    if text.startswith("```"):
        # Remove first fence line
        first_nl = text.find("\n")
        if first_nl != -1:
            text = text[first_nl + 1 :]
        # Remove trailing fence if present
        if text.endswith("```"):
            text = text[:-3]
    text = text.strip()
    if text.startswith(("{", "[")):
        return text
    # Try to extract the first JSON object or array substring if present
    for open_ch, close_ch in (("{", "}"), ("[", "]")):
        start = text.find(open_ch)
        end = text.rfind(close_ch)
        if start != -1 and end > start:
            return text[start : end + 1]
    return text


def parse_records(content: str) -> List[dict]:
    """Decode the model reply into a list of raw item records."""
    try:
        data = json.loads(_clean_json_like(content or ""))
    except json.JSONDecodeError as e:
        raise PrimaryResponseError(f"response is not JSON: {e}") from e
    if isinstance(data, dict):
        for key in ("mcqs", "items", "questions"):
            if isinstance(data.get(key), list):
                data = data[key]
                break
    if not isinstance(data, list):
        raise PrimaryResponseError("response does not contain a list of questions")
    records = [r for r in data if isinstance(r, dict)]
    if not records:
        raise PrimaryResponseError("response contains no question records")
    return records


def build_messages(text: str, gen_config: GenerationConfig) -> List[dict]:
    user = (
        "Text to convert into MCQs (limit to the most essential concepts):\n---\n"
        f"{text[:config.PRIMARY_TEXT_LIMIT]}\n---\n"
        f"Generate {gen_config.count} MCQs."
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT.format(difficulty=gen_config.difficulty)},
        {"role": "user", "content": user},
    ]


async def request_mcqs(text: str, gen_config: GenerationConfig) -> PrimaryResult:
    """Single bounded attempt at the external model. Never raises for provider errors."""
    try:
        client = _get_client()
        rsp = await asyncio.wait_for(
            client.chat.completions.create(
                model=config.OPENAI_MODEL,
                messages=build_messages(text, gen_config),
                temperature=TEMPERATURE.get(gen_config.difficulty, 0.5),
                response_format={"type": "json_object"},
                max_tokens=MAX_TOKENS,
            ),
            timeout=config.OPENAI_TIMEOUT + WAIT_SLACK_SECONDS,
        )
    except (asyncio.TimeoutError, openai.APITimeoutError) as e:
        return PrimaryTimeout(error=str(e) or "timed out")
    except (openai.OpenAIError, RuntimeError) as e:
        return PrimaryUnavailable(error=str(e))

    try:
        content = rsp.choices[0].message.content or ""
        return PrimarySuccess(records=parse_records(content))
    except (PrimaryResponseError, IndexError, AttributeError) as e:
        return PrimaryMalformed(error=str(e))
