"""Async Anthropic Messages client used by every pipeline agent."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import anthropic
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from career_match.errors import ServiceError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5"
WEB_SEARCH_TOOL_TYPE = "web_search_20250305"


@dataclass
class LLMResponse:
    """Joined text of one completion plus its token counts."""

    text: str
    input_tokens: int
    output_tokens: int
    stop_reason: str | None = None


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, anthropic.APIConnectionError):
        return True
    if isinstance(exc, anthropic.APIStatusError):
        return exc.status_code == 429 or exc.status_code >= 500
    return False


def web_search_tool(max_uses: int = 5) -> dict:
    """Tool definition letting the service augment answers with live search."""
    return {"type": WEB_SEARCH_TOOL_TYPE, "name": "web_search", "max_uses": max_uses}


class LLMClient:
    """Async Claude API client with exponential-backoff retries on transient errors."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        model: str = DEFAULT_MODEL,
        max_retries: int = 3,
    ):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self.model = model
        self.max_retries = max(1, max_retries)
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    async def _call_api(self, **kwargs) -> anthropic.types.Message:
        """Make the actual API call, retrying connection failures, 429 and 5xx."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(min=1, max=10),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        ):
            with attempt:
                return await self.client.messages.create(**kwargs)

    async def complete(
        self,
        system: str,
        messages: list[dict],
        max_tokens: int,
        tools: list[dict] | None = None,
        model: str | None = None,
    ) -> LLMResponse:
        """Send a conversation to Claude and return the concatenated text blocks.

        Raises:
            ServiceError: the API was unreachable or answered with an error
                status after retries were exhausted.
        """
        model = model or self.model
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = tools

        logger.debug("LLM call: model=%s max_tokens=%d tools=%s", model, max_tokens, bool(tools))
        try:
            message = await self._call_api(**kwargs)
        except anthropic.APIStatusError as exc:
            logger.error("LLM call failed with status %s", exc.status_code, exc_info=True)
            raise ServiceError(exc.status_code, str(exc)[:200]) from exc
        except anthropic.APIConnectionError as exc:
            logger.error("LLM call could not reach the API", exc_info=True)
            raise ServiceError(0, str(exc)[:200]) from exc

        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((model, input_tokens, output_tokens))
        text = "\n".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        return LLMResponse(
            text=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            stop_reason=getattr(message, "stop_reason", None),
        )

    def get_token_summary(self) -> dict:
        """Drain the per-call token log collected since the last summary."""
        calls, self._token_log = self._token_log, []
        return {
            "input": sum(c[1] for c in calls),
            "output": sum(c[2] for c in calls),
            "calls": calls,
        }
