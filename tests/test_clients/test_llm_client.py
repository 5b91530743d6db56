"""Tests for LLMClient (Claude API wrapper)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from career_match.clients.llm_client import LLMClient, LLMResponse, web_search_tool
from career_match.errors import ServiceError

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _make_api_message(
    *texts: str, input_tokens: int = 100, output_tokens: int = 50, stop_reason: str = "end_turn"
) -> MagicMock:
    """Build a mock anthropic Message-like object."""
    message = MagicMock()
    message.usage.input_tokens = input_tokens
    message.usage.output_tokens = output_tokens
    message.stop_reason = stop_reason
    message.content = [MagicMock(type="text", text=t) for t in texts]
    return message


def _status_error(status: int) -> anthropic.APIStatusError:
    response = httpx.Response(status, request=_REQUEST)
    return anthropic.APIStatusError(f"error {status}", response=response, body=None)


def _client_returning(mock_cls, *, return_value=None, side_effect=None) -> MagicMock:
    mock_client = MagicMock()
    mock_client.messages.create = AsyncMock(return_value=return_value, side_effect=side_effect)
    mock_cls.return_value = mock_client
    return mock_client


class TestLLMClientInit:
    def test_init_default_creates_client_with_no_kwargs(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient()
            mock_cls.assert_called_once_with()

    def test_init_with_api_key_and_timeout(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient(api_key="test-key", timeout=30.0)
            mock_cls.assert_called_once_with(api_key="test-key", timeout=30.0)


class TestLLMClientComplete:
    async def test_returns_llm_response(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _client_returning(mock_cls, return_value=_make_api_message("hello world"))
            llm = LLMClient()
            result = await llm.complete("sys", [{"role": "user", "content": "hi"}], 100)

        assert isinstance(result, LLMResponse)
        assert result.text == "hello world"
        assert result.input_tokens == 100
        assert result.output_tokens == 50
        assert result.stop_reason == "end_turn"

    async def test_joins_text_blocks_and_skips_tool_blocks(self):
        message = _make_api_message("part one", "part two")
        message.content.insert(1, MagicMock(type="server_tool_use", text="ignored"))
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _client_returning(mock_cls, return_value=message)
            llm = LLMClient()
            result = await llm.complete("", [{"role": "user", "content": "hi"}], 100)

        assert result.text == "part one\npart two"

    async def test_request_shape(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            client = _client_returning(mock_cls, return_value=_make_api_message("ok"))
            llm = LLMClient(model="claude-haiku-4-5")
            tool = web_search_tool(2)
            messages = [{"role": "user", "content": "find jobs"}]
            await llm.complete("Return JSON", messages, 2500, tools=[tool])

        client.messages.create.assert_awaited_once_with(
            model="claude-haiku-4-5",
            max_tokens=2500,
            messages=messages,
            system="Return JSON",
            tools=[tool],
        )

    async def test_empty_system_and_tools_omitted(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            client = _client_returning(mock_cls, return_value=_make_api_message("ok"))
            await LLMClient().complete("", [{"role": "user", "content": "x"}], 10)

        kwargs = client.messages.create.await_args.kwargs
        assert "system" not in kwargs
        assert "tools" not in kwargs

    async def test_client_error_becomes_service_error_without_retry(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            client = _client_returning(mock_cls, side_effect=_status_error(400))
            llm = LLMClient(max_retries=3)
            with pytest.raises(ServiceError) as exc_info:
                await llm.complete("", [{"role": "user", "content": "x"}], 10)

        assert exc_info.value.status == 400
        assert client.messages.create.await_count == 1
        assert llm._token_log == []

    async def test_server_error_retried_then_surfaced(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls, \
             patch("career_match.clients.llm_client.wait_exponential", return_value=lambda *_: 0):
            client = _client_returning(mock_cls, side_effect=_status_error(503))
            llm = LLMClient(max_retries=2)
            with pytest.raises(ServiceError) as exc_info:
                await llm.complete("", [{"role": "user", "content": "x"}], 10)

        assert exc_info.value.status == 503
        assert client.messages.create.await_count == 2

    async def test_transient_error_recovers(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls, \
             patch("career_match.clients.llm_client.wait_exponential", return_value=lambda *_: 0):
            _client_returning(
                mock_cls, side_effect=[_status_error(429), _make_api_message("finally")]
            )
            llm = LLMClient(max_retries=3)
            result = await llm.complete("", [{"role": "user", "content": "x"}], 10)

        assert result.text == "finally"

    async def test_connection_error_has_status_zero(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _client_returning(mock_cls, side_effect=anthropic.APIConnectionError(request=_REQUEST))
            llm = LLMClient(max_retries=1)
            with pytest.raises(ServiceError) as exc_info:
                await llm.complete("", [{"role": "user", "content": "x"}], 10)

        assert exc_info.value.status == 0


class TestLLMClientTokenSummary:
    async def test_token_log_accumulates(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _client_returning(
                mock_cls, return_value=_make_api_message("r", input_tokens=20, output_tokens=8)
            )
            llm = LLMClient(model="claude-sonnet-4-5")
            await llm.complete("", [{"role": "user", "content": "one"}], 10)
            await llm.complete("", [{"role": "user", "content": "two"}], 10)

        assert llm._token_log == [("claude-sonnet-4-5", 20, 8), ("claude-sonnet-4-5", 20, 8)]

    def test_get_token_summary_returns_totals_and_clears(self):
        with patch("career_match.clients.llm_client.anthropic.AsyncAnthropic"):
            llm = LLMClient()
            llm._token_log = [("claude-sonnet-4-5", 100, 50), ("claude-sonnet-4-5", 200, 80)]

        summary = llm.get_token_summary()
        assert summary["input"] == 300
        assert summary["output"] == 130
        assert len(summary["calls"]) == 2
        assert llm.get_token_summary() == {"input": 0, "output": 0, "calls": []}
