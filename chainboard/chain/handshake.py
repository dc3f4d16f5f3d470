"""Handshake that brings a new successor up to date with its predecessor.

The predecessor is the client and the successor is the server. Each side
sends a hello, then the client sends the messages the server lacks (or a
full database snapshot) and the server sends back the confirmations the
client lacks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from chainboard.messages import Confirmation, DatabaseSnapshot, DataMessage

log = logging.getLogger(__name__)


class HandshakeError(Exception):
    """The peer sent a message the handshake did not expect."""


@dataclass
class ClientHello:
    last_conf_index: int = 0


@dataclass
class ServerHello:
    last_msg_index: int = 0
    request_transfer: bool = False


@dataclass
class ClientSync:
    messages: list[DataMessage] = field(default_factory=list)


@dataclass
class ServerSync:
    confirmations: list[Confirmation] = field(default_factory=list)


class _Stream(Protocol):
    def send(self, message: Any) -> None: ...

    def recv(self) -> Any: ...


class _ClientData(Protocol):
    def last_confirmation_index(self) -> int: ...

    def get_messages_after(self, index: int) -> list[DataMessage]: ...

    def process_confirmations(self, confirmations: list[Confirmation]) -> None: ...

    def get_snapshot(self) -> DatabaseSnapshot: ...


class _ServerData(Protocol):
    def last_message_index(self) -> int: ...

    def get_confirmations_after(self, index: int) -> list[Confirmation]: ...

    def process_messages(self, messages: list[DataMessage]) -> None: ...

    def set_from_snapshot(self, snapshot: DatabaseSnapshot) -> None: ...


class _Provider(Protocol):
    def send_hello(self) -> None: ...

    def receive_hello(self) -> None: ...

    def send_missing_data(self) -> None: ...

    def receive_missing_data(self) -> None: ...


def run_handshake(provider: _Provider) -> None:
    """Run the four handshake steps in order, stopping at the first that raises."""
    provider.send_hello()
    provider.receive_hello()
    provider.send_missing_data()
    provider.receive_missing_data()


class ClientHandshake:
    """The predecessor's side of the handshake."""

    def __init__(self, stream: _Stream, data: _ClientData) -> None:
        self.stream = stream
        self.data = data
        self.server_hello: Optional[ServerHello] = None

    def _hello(self) -> ServerHello:
        if self.server_hello is None:
            raise RuntimeError("illegal state: server hello not received")
        return self.server_hello

    def send_hello(self) -> None:
        self.stream.send(ClientHello(self.data.last_confirmation_index()))

    def receive_hello(self) -> None:
        received = self.stream.recv()
        if not isinstance(received, ServerHello):
            raise HandshakeError("invalid handshake message: expected server hello")
        self.server_hello = received

    def send_missing_data(self) -> None:
        hello = self._hello()
        if hello.request_transfer:
            log.info("Sending full DB snapshot")
            self.stream.send(self.data.get_snapshot())
            return
        log.info("successor: last message index: %d", hello.last_msg_index)
        self.stream.send(ClientSync(self.data.get_messages_after(hello.last_msg_index)))

    def receive_missing_data(self) -> None:
        if self._hello().request_transfer:
            return
        received = self.stream.recv()
        if not isinstance(received, ServerSync):
            raise HandshakeError("invalid handshake message: expected server sync")
        log.info("Received missing confirmations")
        self.data.process_confirmations(received.confirmations)


class ServerHandshake:
    """The successor's side of the handshake."""

    def __init__(self, stream: _Stream, data: _ServerData) -> None:
        self.stream = stream
        self.data = data
        self.client_hello: Optional[ClientHello] = None

    def send_hello(self) -> None:
        last = self.data.last_message_index()
        self.stream.send(ServerHello(last_msg_index=last, request_transfer=last == -1))

    def receive_hello(self) -> None:
        received = self.stream.recv()
        if not isinstance(received, ClientHello):
            raise HandshakeError("invalid handshake message: expected client hello")
        self.client_hello = received
        log.info("Client: last confirmation index: %d", received.last_conf_index)

    def send_missing_data(self) -> None:
        if self.data.last_message_index() == -1:
            return
        if self.client_hello is None:
            raise RuntimeError("illegal data")
        last = self.client_hello.last_conf_index
        self.stream.send(ServerSync(self.data.get_confirmations_after(last)))

    def receive_missing_data(self) -> None:
        received = self.stream.recv()
        if isinstance(received, ClientSync):
            log.info("Received missing messages")
            self.data.process_messages(received.messages)
        elif isinstance(received, DatabaseSnapshot):
            log.info("Received full DB snapshot")
            self.data.set_from_snapshot(received)
        else:
            raise HandshakeError(
                "invalid handshake message: expected client sync or db snapshot"
            )


def client_handshake(stream: _Stream, data: _ClientData) -> None:
    run_handshake(ClientHandshake(stream, data))


def server_handshake(stream: _Stream, data: _ServerData) -> None:
    run_handshake(ServerHandshake(stream, data))