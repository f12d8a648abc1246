"""
Tests for the primary model client
"""
import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from mcqgen import config
from mcqgen.errors import PrimaryResponseError
from mcqgen.schemas import GenerationConfig
from mcqgen.services.llm import (
    PrimaryMalformed, PrimarySuccess, PrimaryTimeout, PrimaryUnavailable,
    _clean_json_like, build_messages, parse_records, request_mcqs,
)


def _client(create):
    client = MagicMock()
    client.chat.completions.create = create
    return client


def _reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestParseRecords:
    def test_fenced_object(self):
        """Code fences around the JSON are ignored"""
        content = '```json\n{"mcqs": [{"question": "Q?"}]}\n```'
        assert parse_records(content) == [{"question": "Q?"}]

    def test_bare_array(self):
        """A top-level array is accepted"""
        assert parse_records('[{"question": "Q?"}]') == [{"question": "Q?"}]

    def test_prose_around_json(self):
        """Chatter before and after the object is stripped"""
        content = 'Here you go: {"items": [{"question": "Q?"}]} Good luck!'
        assert parse_records(content) == [{"question": "Q?"}]

    @pytest.mark.parametrize("content", ["not json at all", '{"foo": 1}', '{"mcqs": []}', '{"mcqs": ["a", "b"]}', ""])
    def test_malformed(self, content):
        """Anything without question records is rejected"""
        with pytest.raises(PrimaryResponseError):
            parse_records(content)

    def test_clean_json_like(self):
        """Only the JSON payload is kept"""
        assert _clean_json_like('```\n[1, 2]\n```') == "[1, 2]"


class TestBuildMessages:
    def test_text_is_truncated(self):
        """Only the head of the text is sent"""
        messages = build_messages("x" * 9000, GenerationConfig(count=4, difficulty="hard"))
        user = messages[1]["content"]
        assert "x" * config.PRIMARY_TEXT_LIMIT in user
        assert "x" * (config.PRIMARY_TEXT_LIMIT + 1) not in user
        assert "Generate 4 MCQs." in user
        assert "Tailor difficulty to: hard" in messages[0]["content"]


class TestRequestMcqs:
    gen_config = GenerationConfig(count=3)

    def test_no_key(self):
        """Missing credentials mean the provider is unavailable"""
        with patch.object(config, "OPENAI_API_KEY", None):
            result = asyncio.run(request_mcqs("Some study text here.", self.gen_config))
        assert isinstance(result, PrimaryUnavailable)
        assert result.reason == "unavailable"

    def test_success(self):
        """A valid reply yields its records"""
        create = AsyncMock(return_value=_reply('{"mcqs": [{"question": "Q?"}]}'))
        with patch("mcqgen.services.llm._get_client", return_value=_client(create)):
            result = asyncio.run(request_mcqs("Some study text here.", self.gen_config))
        assert isinstance(result, PrimarySuccess)
        assert result.records == [{"question": "Q?"}]
        kwargs = create.await_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.5

    def test_timeout(self):
        """Timeouts are reported, not raised"""
        create = AsyncMock(side_effect=asyncio.TimeoutError())
        with patch("mcqgen.services.llm._get_client", return_value=_client(create)):
            result = asyncio.run(request_mcqs("Some study text here.", self.gen_config))
        assert isinstance(result, PrimaryTimeout)

    def test_connection_error(self):
        """Transport failures mean the provider is unavailable"""
        error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
        create = AsyncMock(side_effect=error)
        with patch("mcqgen.services.llm._get_client", return_value=_client(create)):
            result = asyncio.run(request_mcqs("Some study text here.", self.gen_config))
        assert isinstance(result, PrimaryUnavailable)

    def test_malformed_reply(self):
        """Unparseable content is reported as malformed"""
        create = AsyncMock(return_value=_reply("Sorry, I cannot help with that."))
        with patch("mcqgen.services.llm._get_client", return_value=_client(create)):
            result = asyncio.run(request_mcqs("Some study text here.", self.gen_config))
        assert isinstance(result, PrimaryMalformed)
