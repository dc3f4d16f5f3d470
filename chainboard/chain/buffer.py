"""Bounded buffer of indexed items kept in strictly increasing index order."""

from __future__ import annotations

import sys
import threading
from collections import deque
from typing import Any, Generic, Protocol, TypeVar

MAX_SIZE = sys.maxsize


class Indexable(Protocol):
    message_index: int


T = TypeVar("T", bound=Indexable)


class BufferError(Exception):
    """Base of replay buffer errors."""


class IncompleteResultError(BufferError):
    """Items directly after the requested index are missing; what is there is kept."""

    def __init__(self, messages: list[Any]) -> None:
        super().__init__("incomplete result")
        self.messages = messages


class IndexOutOfOrderError(BufferError):
    def __init__(self, index: int) -> None:
        super().__init__(f"index out of order: {index}")
        self.index = index


class NoBufferedMessagesError(BufferError):
    def __init__(self) -> None:
        super().__init__("no buffered messages")


class ReplayBuffer(Generic[T]):
    """Keeps the latest items so that they can be replayed after an index."""

    def __init__(self, size: int = MAX_SIZE) -> None:
        self.size = size
        self._items: deque[T] = deque(maxlen=size)
        self._lock = threading.Lock()

    def add(self, *args: T) -> None:
        """Append items; raise on the first whose index does not increase."""
        with self._lock:
            for item in args:
                if self._items and item.message_index <= self._items[-1].message_index:
                    raise IndexOutOfOrderError(item.message_index)
                self._items.append(item)

    def last_message_index(self) -> int:
        with self._lock:
            if not self._items:
                raise NoBufferedMessagesError()
            return self._items[-1].message_index

    def messages_after(self, index: int) -> list[T]:
        """Items following index; IncompleteResultError if a gap precedes them."""
        with self._lock:
            items = list(self._items)
        for position, item in enumerate(items):
            if item.message_index == index:
                return items[position + 1:]
            if item.message_index == index + 1:
                return items[position:]
            if item.message_index > index:
                raise IncompleteResultError(items[position:])
        raise NoBufferedMessagesError()

    def clear_before(self, index: int) -> None:
        """Drop items with a lower index, unless none reaches it."""
        with self._lock:
            if not any(item.message_index >= index for item in self._items):
                return
            while self._items[0].message_index < index:
                self._items.popleft()