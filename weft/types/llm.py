"""LLM provider types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .messages import Message, SystemMessage, ToolCall


class ToolChoice(str, Enum):
    NONE = "none"
    AUTO = "auto"
    REQUIRED = "required"


@dataclass
class LLMResponse:
    content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)


@runtime_checkable
class LLMProvider(Protocol):
    async def ask(
        self,
        messages: list[Message],
        system_msgs: list[SystemMessage] | None = None,
        temperature: float | None = None,
        model: str | None = None,
    ) -> str: ...

    async def ask_tool(
        self,
        messages: list[Message],
        system_msgs: list[SystemMessage] | None = None,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: ToolChoice = ToolChoice.AUTO,
        temperature: float | None = None,
        model: str | None = None,
    ) -> LLMResponse | None: ...
