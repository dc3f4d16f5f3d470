"""State machine tracking a node's position in the chain and its role."""

from __future__ import annotations

import enum
import queue
import threading
from dataclasses import dataclass, replace


class Position(enum.Enum):
    HEAD = "Head"
    MIDDLE = "Middle"
    TAIL = "Tail"
    SINGLE = "Single"

    def __str__(self) -> str:
        return self.value


class Role(enum.Enum):
    RELAY = "Relay"
    READER = "Reader"
    CONFIRMER = "Confirmer"
    READER_CONFIRMER = "ReaderConfirmer"

    def __str__(self) -> str:
        return self.value


class Event(enum.Enum):
    PREDECESSOR_CONNECT = "PredecessorConnect"
    SUCCESSOR_CONNECT = "SuccessorConnect"
    PREDECESSOR_DISCONNECT = "PredecessorDisconnect"
    SUCCESSOR_DISCONNECT = "SuccessorDisconnect"
    ROLE_RELAY = "RoleRelay"
    ROLE_READER = "RoleReader"
    ROLE_CONFIRMER = "RoleConfirmer"
    ROLE_READER_CONFIRMER = "RoleReaderConfirmer"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NodeState:
    position: Position
    role: Role
    illegal: bool = False

    def __str__(self) -> str:
        if self.illegal:
            return "(Illegal)"
        return f"({self.position}; {self.role})"


class IllegalTransitionError(Exception):
    def __init__(self, state: NodeState, event: Event) -> None:
        super().__init__(f"illegal transition: {event}{state}")
        self.state = state
        self.event = event


_PREDECESSOR_CONNECT = {Position.SINGLE: Position.TAIL, Position.HEAD: Position.MIDDLE}
_SUCCESSOR_CONNECT = {Position.SINGLE: Position.HEAD, Position.TAIL: Position.MIDDLE}
_PREDECESSOR_DISCONNECT = {Position.TAIL: Position.SINGLE, Position.MIDDLE: Position.HEAD}
_SUCCESSOR_DISCONNECT = {Position.HEAD: Position.SINGLE, Position.MIDDLE: Position.TAIL}


class NodeDFA:
    """Applies events to the node state and queues every state reached."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: queue.Queue[NodeState] = queue.Queue(maxsize=100)
        self.last_state = NodeState(Position.SINGLE, Role.READER_CONFIRMER)

    def states(self) -> queue.Queue:
        """Queue of the states reached, in order."""
        return self._states

    def _next(self, state: NodeState, event: Event) -> NodeState:
        def move(table: dict[Position, Position]) -> NodeState:
            if state.position not in table:
                raise IllegalTransitionError(state, event)
            return replace(state, position=table[state.position])

        def assume(role: Role, allowed: tuple[Position, ...]) -> NodeState:
            if state.position not in allowed:
                raise IllegalTransitionError(state, event)
            return replace(state, role=role)

        match event:
            case Event.PREDECESSOR_CONNECT:
                if state.role in (Role.READER_CONFIRMER, Role.READER):
                    raise IllegalTransitionError(state, event)
                return move(_PREDECESSOR_CONNECT)
            case Event.SUCCESSOR_CONNECT:
                if state.role in (Role.CONFIRMER, Role.READER_CONFIRMER):
                    raise IllegalTransitionError(state, event)
                return move(_SUCCESSOR_CONNECT)
            case Event.PREDECESSOR_DISCONNECT:
                return move(_PREDECESSOR_DISCONNECT)
            case Event.SUCCESSOR_DISCONNECT:
                return move(_SUCCESSOR_DISCONNECT)
            case Event.ROLE_CONFIRMER:
                return assume(Role.CONFIRMER, (Position.SINGLE, Position.TAIL))
            case Event.ROLE_READER:
                return assume(Role.READER, (Position.SINGLE, Position.HEAD))
            case Event.ROLE_READER_CONFIRMER:
                return assume(Role.READER_CONFIRMER, (Position.SINGLE,))
            case Event.ROLE_RELAY:
                return replace(state, role=Role.RELAY)
        raise IllegalTransitionError(state, event)

    def emit(self, event: Event) -> None:
        """Apply event; IllegalTransitionError leaves the state unchanged."""
        with self._lock:
            self.last_state = self._next(self.last_state, event)
            self._states.put(self.last_state)