"""Conversation memory: recent messages in original form, FIFO eviction."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator

from .types import Message

DEFAULT_MAX_MESSAGES = 100


class Memory:
    """Append-only bounded log of messages owned by a single agent.

    Insertion order is chronological order. Once the log holds more than
    ``max_messages`` entries the oldest are dropped first.
    """

    def __init__(self, max_messages: int = DEFAULT_MAX_MESSAGES) -> None:
        if max_messages < 1:
            raise ValueError("max_messages must be at least 1")
        self.max_messages = max_messages
        self._messages: deque[Message] = deque()

    def add_message(self, msg: Message) -> list[Message]:
        self._messages.append(msg)
        return self._evict()

    def add_messages(self, msgs: Iterable[Message]) -> list[Message]:
        self._messages.extend(msgs)
        return self._evict()

    def get_recent_messages(self, n: int) -> list[Message]:
        if n <= 0:
            return []
        return list(self._messages)[-n:]

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def clear(self) -> None:
        self._messages.clear()

    def _evict(self) -> list[Message]:
        evicted: list[Message] = []
        while len(self._messages) > self.max_messages:
            evicted.append(self._messages.popleft())
        return evicted

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))
