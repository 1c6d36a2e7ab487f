"""Base LLM provider with retry and an input-size guard."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from ..errors import EmptyLLMResponse, TokenLimitExceeded
from ..infra.logging import get_logger
from ..types import LLMResponse, Message, SystemMessage, ToolChoice
from .tokens import TokenCounter, get_token_counter

logger = get_logger(__name__)

T = TypeVar("T")

# raised for requests that would fail the same way on every attempt
NON_RETRYABLE: tuple[type[Exception], ...] = (TokenLimitExceeded, EmptyLLMResponse)


@dataclass
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0


class BaseLLMProvider:
    """Abstract base with retry. Subclass and implement ``_do_ask`` / ``_do_ask_tool``.

    System messages are placed ahead of the history before the subclass sees
    them. When ``max_input_tokens`` is set, requests whose estimated size
    exceeds it fail with ``TokenLimitExceeded`` without being sent.
    """

    def __init__(
        self,
        retry: RetryConfig | None = None,
        max_input_tokens: int | None = None,
        token_counter: TokenCounter | None = None,
    ) -> None:
        self._retry = retry or RetryConfig()
        self.max_input_tokens = max_input_tokens
        self._token_counter = token_counter

    @property
    def token_counter(self) -> TokenCounter:
        if self._token_counter is None:
            self._token_counter = get_token_counter()
        return self._token_counter

    async def ask(
        self,
        messages: list[Message],
        system_msgs: list[SystemMessage] | None = None,
        temperature: float | None = None,
        model: str | None = None,
    ) -> str:
        full = [*(system_msgs or []), *messages]
        self._check_input(full)
        result = await self._with_retry(lambda: self._do_ask(full, temperature=temperature, model=model))
        if not result:
            raise EmptyLLMResponse(type(self).__name__)
        return result

    async def ask_tool(
        self,
        messages: list[Message],
        system_msgs: list[SystemMessage] | None = None,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: ToolChoice = ToolChoice.AUTO,
        temperature: float | None = None,
        model: str | None = None,
    ) -> LLMResponse | None:
        full = [*(system_msgs or []), *messages]
        self._check_input(full, tools)
        return await self._with_retry(
            lambda: self._do_ask_tool(
                full, tools=tools or [], tool_choice=ToolChoice(tool_choice), temperature=temperature, model=model
            )
        )

    # -- Override these --

    async def _do_ask(self, messages: list[Message], temperature: float | None, model: str | None) -> str:
        raise NotImplementedError

    async def _do_ask_tool(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]],
        tool_choice: ToolChoice,
        temperature: float | None,
        model: str | None,
    ) -> LLMResponse | None:
        raise NotImplementedError

    # -- Internals --

    def _check_input(self, messages: list[Message], tools: list[dict[str, Any]] | None = None) -> None:
        if self.max_input_tokens is None:
            return
        estimated = self.token_counter.count_messages(messages, tools)
        if estimated > self.max_input_tokens:
            raise TokenLimitExceeded(estimated, self.max_input_tokens)

    async def _with_retry(self, fn: Callable[[], Awaitable[T]]) -> T:
        last_err: Exception | None = None
        for i in range(self._retry.max_retries + 1):
            try:
                return await fn()
            except NON_RETRYABLE:
                raise
            except Exception as e:
                last_err = e
                if i < self._retry.max_retries:
                    delay = min(
                        self._retry.base_delay * (2 ** i) + random.random() * 0.1,
                        self._retry.max_delay,
                    )
                    logger.warning("llm_retry", attempt=i + 1, delay=round(delay, 2), error=str(e))
                    await asyncio.sleep(delay)
        raise last_err  # type: ignore[misc]
