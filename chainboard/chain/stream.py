"""Pumps a pair of queues through a bidirectional stream until it fails or is stopped."""

from __future__ import annotations

import queue
import threading
from typing import Any, Generic, Optional, Protocol, TypeVar

O = TypeVar("O")
I = TypeVar("I")


class _BidiStream(Protocol):
    def send(self, item: Any) -> None: ...

    def recv(self) -> Any: ...


class StreamError(Exception):
    """The stream stopped; a failure of the stream itself is chained as the cause."""


class StreamCancelled(StreamError):
    """The stream was stopped from outside."""

    def __init__(self) -> None:
        super().__init__("stream cancelled")


class _Session:
    def __init__(self) -> None:
        self.done = threading.Event()
        self._lock = threading.Lock()
        self.cause: Optional[StreamError] = None

    def cancel(self, cause: StreamError) -> None:
        with self._lock:
            if self.cause is None:
                self.cause = cause
        self.done.set()


def _failure(text: str, exc: BaseException) -> StreamError:
    error = StreamError(f"{text}: {exc}")
    error.__cause__ = exc
    return error


class Supervisor(Generic[O, I]):
    """Sends items from the outbound queue and puts received items on the inbound queue."""

    def __init__(
        self,
        outbound: queue.Queue,
        inbound: queue.Queue,
        poll_interval: float = 0.05,
    ) -> None:
        self.outbound = outbound
        self.inbound = inbound
        self._poll_interval = poll_interval
        self._lock = threading.Lock()
        self._dropped: Optional[O] = None

    def dropped_message(self) -> Optional[O]:
        """The item whose sending failed, if any."""
        with self._lock:
            return self._dropped

    def run(self, stream: _BidiStream, stop: Optional[threading.Event] = None) -> None:
        """Block until the stream fails or stop is set; always ends by raising StreamError."""
        session = _Session()
        threading.Thread(target=self._transmit, args=(stream, session), daemon=True).start()
        threading.Thread(target=self._receive, args=(stream, session), daemon=True).start()
        while not session.done.is_set():
            if stop is not None and stop.is_set():
                session.cancel(StreamCancelled())
                break
            session.done.wait(self._poll_interval)
        assert session.cause is not None
        raise session.cause

    def _transmit(self, stream: _BidiStream, session: _Session) -> None:
        while not session.done.is_set():
            try:
                item = self.outbound.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            try:
                stream.send(item)
            except Exception as exc:
                with self._lock:
                    self._dropped = item
                session.cancel(_failure("failed to send message", exc))
                return

    def _receive(self, stream: _BidiStream, session: _Session) -> None:
        while True:
            try:
                item = stream.recv()
            except Exception as exc:
                session.cancel(_failure("failed to receive confirmation", exc))
                return
            while not session.done.is_set():
                try:
                    self.inbound.put(item, timeout=self._poll_interval)
                    break
                except queue.Full:
                    continue
            if session.done.is_set():
                return