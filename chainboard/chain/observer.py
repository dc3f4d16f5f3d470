"""Buffers every message and confirmation a node sees so they can be replayed."""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from chainboard.chain.buffer import (
    MAX_SIZE,
    BufferError,
    IndexOutOfOrderError,
    NoBufferedMessagesError,
    ReplayBuffer,
)
from chainboard.messages import Confirmation, DatabaseSnapshot, DataMessage

log = logging.getLogger(__name__)

CONFIRMATION_BUFFER_SIZE = 1000


class _MessageInterceptor(Protocol):
    def on_message(self, message: DataMessage) -> None: ...

    def on_confirmation(self, confirmation: Confirmation) -> None: ...


class _DatabaseTransfer(Protocol):
    def get_snapshot(self) -> DatabaseSnapshot: ...

    def set_from_snapshot(self, snapshot: DatabaseSnapshot) -> None: ...


class OpCounter:
    """Thread-safe counter of operations applied to the chain."""

    def __init__(self, initial: int = 0) -> None:
        self._value = initial
        self._lock = threading.Lock()

    def next(self) -> int:
        """Advance the counter and return the new value."""
        with self._lock:
            self._value += 1
            return self._value

    def reset(self, initial: int) -> None:
        with self._lock:
            self._value = initial

    def current(self) -> int:
        with self._lock:
            return self._value

    def revert(self) -> None:
        with self._lock:
            self._value -= 1


class BufferedInterceptor:
    """Numbers and buffers traffic before passing it to another interceptor.

    Also serves as the data source of both sides of the chain handshake.
    """

    def __init__(
        self,
        database_transfer: _DatabaseTransfer,
        interceptor: _MessageInterceptor,
    ) -> None:
        self.database_transfer = database_transfer
        self.base_interceptor = interceptor
        self.op_counter = OpCounter(0)
        self.message_buffer: ReplayBuffer[DataMessage] = ReplayBuffer(MAX_SIZE)
        self.confirmation_buffer: ReplayBuffer[Confirmation] = ReplayBuffer(
            CONFIRMATION_BUFFER_SIZE
        )

    def on_message(self, message: DataMessage) -> None:
        """Number a message if needed, buffer it and pass it on.

        Duplicates are ignored; errors of the wrapped interceptor propagate.
        """
        if message.message_index == 0:
            message.message_index = self.op_counter.next()
        elif message.message_index != self.op_counter.next():
            log.warning("Received message with wrong index: %d", message.message_index)
        log.info("Received message: %d", message.message_index)
        try:
            self.message_buffer.add(message)
        except IndexOutOfOrderError:
            log.info("Ignoring duplicate message: %d", message.message_index)
            return
        self.base_interceptor.on_message(message)

    def on_confirmation(self, confirmation: Confirmation) -> None:
        """Buffer a confirmation, forget the messages it settles and pass it on."""
        log.info("Received confirmation: %d", confirmation.message_index)
        try:
            self.confirmation_buffer.add(confirmation)
        except IndexOutOfOrderError:
            log.info("Ignoring duplicate confirmation: %d", confirmation.message_index)
            return
        # Confirmed messages are held by every node, so they need not be kept.
        self.message_buffer.clear_before(confirmation.message_index)
        self.base_interceptor.on_confirmation(confirmation)

    def get_messages_after(self, index: int) -> list[DataMessage]:
        """Buffered messages following index; empty when they cannot all be given."""
        try:
            return self.message_buffer.messages_after(index)
        except BufferError as exc:
            log.warning("Error getting messages after %d: %s", index, exc)
            return []

    def get_confirmations_after(self, index: int) -> list[Confirmation]:
        """Buffered confirmations following index; empty when they cannot all be given."""
        try:
            return self.confirmation_buffer.messages_after(index)
        except BufferError as exc:
            log.warning("Error getting confirmations after %d: %s", index, exc)
            return []

    def process_messages(self, messages: list[DataMessage]) -> None:
        for message in messages:
            try:
                self.on_message(message)
            except Exception as exc:
                log.warning("Failed to process message: %s", exc)

    def process_confirmations(self, confirmations: list[Confirmation]) -> None:
        for confirmation in confirmations:
            self.on_confirmation(confirmation)

    def last_message_index(self) -> int:
        """Index of the last buffered message, or -1 when there is none."""
        try:
            return self.message_buffer.last_message_index()
        except NoBufferedMessagesError:
            return -1

    def last_confirmation_index(self) -> int:
        """Index of the last buffered confirmation, or -1 when there is none."""
        try:
            return self.confirmation_buffer.last_message_index()
        except NoBufferedMessagesError:
            return -1

    def get_snapshot(self) -> DatabaseSnapshot:
        snapshot = self.database_transfer.get_snapshot()
        snapshot.op_count = self.op_counter.current()
        return snapshot

    def set_from_snapshot(self, snapshot: DatabaseSnapshot) -> None:
        self.op_counter.reset(snapshot.op_count)
        self.database_transfer.set_from_snapshot(snapshot)