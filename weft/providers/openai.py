"""OpenAI-compatible LLM provider."""

from __future__ import annotations

import json
from typing import Any

from openai import AsyncAzureOpenAI, AsyncOpenAI

from ..config import LLMSettings
from ..infra.logging import get_logger
from ..types import LLMResponse, Message, Role, ToolCall, ToolChoice, UserMessage, message_to_dict
from .base import BaseLLMProvider, RetryConfig

logger = get_logger(__name__)


def _part_to_openai(part: dict[str, Any]) -> dict[str, Any]:
    if part.get("type") in ("image", "image_url"):
        url = part.get("image_url")
        if isinstance(url, str):
            url = {"url": url}
        return {"type": "image_url", "image_url": url}
    return part


def _msg_to_dict(m: Message) -> dict[str, Any]:
    d = message_to_dict(m)
    if isinstance(d.get("content"), list):
        d["content"] = [_part_to_openai(p) for p in d["content"]]
    for tc in d.get("tool_calls", []):
        if not isinstance(tc["function"]["arguments"], str):
            tc["function"]["arguments"] = json.dumps(tc["function"]["arguments"])
    image = d.pop("base64_image", None)
    # tool messages only carry text; _to_openai sends their image as a user turn
    if image and m.role is not Role.TOOL:
        text = d.get("content")
        parts: list[dict[str, Any]] = []
        if isinstance(text, list):
            parts.extend(text)
        elif text:
            parts.append({"type": "text", "text": text})
        parts.append({"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{image}"}})
        d["content"] = parts
    # the API rejects assistant turns carrying neither content nor tool calls
    if m.role is Role.ASSISTANT and "content" not in d and "tool_calls" not in d:
        d["content"] = ""
    return d


def _to_openai(messages: list[Message]) -> list[dict[str, Any]]:
    """Serialize a history window, dropping tool replies whose call was evicted."""
    out: list[dict[str, Any]] = []
    offered: set[str] = set()
    for m in messages:
        if m.role is Role.TOOL and m.tool_call_id not in offered:
            logger.debug("orphan_tool_reply_skipped", tool_call_id=m.tool_call_id, name=m.name)
            continue
        offered.update(tc.id for tc in getattr(m, "tool_calls", None) or [])
        out.append(_msg_to_dict(m))
        image = getattr(m, "base64_image", None)
        if image and m.role is Role.TOOL:
            out.append(_msg_to_dict(UserMessage(content="Image produced by the tool above.", base64_image=image)))
    return out


class OpenAIProvider(BaseLLMProvider):
    def __init__(self, settings: LLMSettings, client: Any = None, retry: RetryConfig | None = None) -> None:
        super().__init__(retry=retry, max_input_tokens=settings.max_input_tokens)
        if client is not None:
            self._client = client
        elif settings.api_type == "azure":
            self._client = AsyncAzureOpenAI(
                api_key=settings.api_key, azure_endpoint=settings.base_url or "", api_version=settings.api_version
            )
        else:
            self._client = AsyncOpenAI(api_key=settings.api_key, base_url=settings.base_url)
        self._model = settings.model
        self._temperature = settings.temperature
        self._max_tokens = settings.max_tokens

    def _base_kwargs(self, messages: list[Message], temperature: float | None, model: str | None) -> dict[str, Any]:
        return {
            "model": model or self._model,
            "messages": _to_openai(messages),
            "temperature": self._temperature if temperature is None else temperature,
            "max_tokens": self._max_tokens,
        }

    async def _do_ask(self, messages: list[Message], temperature: float | None, model: str | None) -> str:
        resp = await self._client.chat.completions.create(**self._base_kwargs(messages, temperature, model))
        if not resp.choices:
            return ""
        return resp.choices[0].message.content or ""

    async def _do_ask_tool(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]],
        tool_choice: ToolChoice,
        temperature: float | None,
        model: str | None,
    ) -> LLMResponse | None:
        kwargs = self._base_kwargs(messages, temperature, model)
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = tool_choice.value
        resp = await self._client.chat.completions.create(**kwargs)
        if not resp.choices:
            return None
        message = resp.choices[0].message
        tool_calls = [
            ToolCall(id=tc.id, name=tc.function.name, arguments=tc.function.arguments)
            for tc in (message.tool_calls or [])
        ]
        return LLMResponse(content=message.content, tool_calls=tool_calls)
