"""Message types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class ToolCall:
    """A function invocation requested by the model.

    ``arguments`` is kept as the model produced it (usually a JSON string);
    the tool registry parses it at dispatch time.
    """

    id: str
    name: str
    arguments: str | dict[str, Any] = "{}"


@dataclass(frozen=True)
class ContentPart:
    type: str = "text"  # "text" | "image"
    text: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class SystemMessage:
    content: str
    role: Role = Role.SYSTEM


@dataclass(frozen=True)
class UserMessage:
    content: str | list[ContentPart] = ""
    base64_image: str | None = None
    role: Role = Role.USER


@dataclass(frozen=True)
class AssistantMessage:
    content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    base64_image: str | None = None
    role: Role = Role.ASSISTANT


@dataclass(frozen=True)
class ToolMessage:
    content: str
    tool_call_id: str
    name: str | None = None
    base64_image: str | None = None
    role: Role = Role.TOOL


Message = SystemMessage | UserMessage | AssistantMessage | ToolMessage


def message_to_dict(msg: Message) -> dict[str, Any]:
    """Plain-dict form of a message, omitting empty optional fields."""
    d: dict[str, Any] = {"role": msg.role.value}
    content = msg.content
    if isinstance(content, list):
        d["content"] = [
            {k: v for k, v in (("type", p.type), ("text", p.text), ("image_url", p.image_url)) if v is not None}
            for p in content
        ]
    elif content is not None:
        d["content"] = content
    tool_calls = getattr(msg, "tool_calls", None)
    if tool_calls:
        d["tool_calls"] = [
            {"id": tc.id, "type": "function", "function": {"name": tc.name, "arguments": tc.arguments}}
            for tc in tool_calls
        ]
    for key in ("name", "tool_call_id", "base64_image"):
        value = getattr(msg, key, None)
        if value:
            d[key] = value
    return d
