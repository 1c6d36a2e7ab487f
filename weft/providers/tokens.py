"""
Token counting with tiktoken

Counts the prompt a provider is about to send so oversized requests can be
refused before they reach the network.
"""

from __future__ import annotations

import json
from typing import Any

import tiktoken

from ..types import Message

DEFAULT_ENCODING = "cl100k_base"


class TokenCounter:
    """
    Token counter over a tiktoken encoding.

    Counts for identical strings are cached per instance; system prompts and
    tool schemas repeat on every request.
    """

    # per-message formatting overhead for the role field
    ROLE_TOKENS = 3

    def __init__(self, encoding: str = DEFAULT_ENCODING, cache_size: int = 2048) -> None:
        self.encoding_name = encoding
        self.encoder = tiktoken.get_encoding(encoding)
        self._cache: dict[str, int] = {}
        self._cache_maxsize = cache_size
        self._cache_hits = 0
        self._cache_misses = 0

    def count_string(self, text: str) -> int:
        if not text:
            return 0
        if text in self._cache:
            self._cache_hits += 1
            return self._cache[text]

        self._cache_misses += 1
        result = len(self.encoder.encode(text, disallowed_special=()))
        if len(self._cache) >= self._cache_maxsize:
            # drop the oldest entry
            self._cache.pop(next(iter(self._cache)))
        self._cache[text] = result
        return result

    def count_message(self, message: Message) -> int:
        content = message.content if isinstance(message.content, str) else _parts_text(message.content)
        total = self.count_string(content) + self.ROLE_TOKENS
        for tc in getattr(message, "tool_calls", None) or []:
            args = tc.arguments if isinstance(tc.arguments, str) else json.dumps(tc.arguments)
            total += self.count_string(tc.name) + self.count_string(args)
        return total

    def count_messages(self, messages: list[Message], tools: list[dict[str, Any]] | None = None) -> int:
        total = sum(self.count_message(m) for m in messages)
        if tools:
            total += self.count_string(json.dumps(tools))
        return total

    def get_cache_info(self) -> dict[str, int]:
        return {
            "hits": self._cache_hits,
            "misses": self._cache_misses,
            "currsize": len(self._cache),
            "maxsize": self._cache_maxsize,
        }

    def clear_cache(self) -> None:
        self._cache.clear()
        self._cache_hits = 0
        self._cache_misses = 0


def _parts_text(parts: Any) -> str:
    if not parts:
        return ""
    return "\n".join(p.text for p in parts if getattr(p, "text", None))


_counter: TokenCounter | None = None


def get_token_counter() -> TokenCounter:
    """Shared counter for the default encoding."""
    global _counter
    if _counter is None:
        _counter = TokenCounter()
    return _counter
