import queue

import pytest

from chainboard.chain.state import (
    Event,
    IllegalTransitionError,
    NodeDFA,
    NodeState,
    Position,
    Role,
)


def test_transitions():
    dfa = NodeDFA()
    dfa.emit(Event.ROLE_RELAY)
    assert dfa.states().get_nowait().role is Role.RELAY

    dfa.emit(Event.SUCCESSOR_CONNECT)
    assert dfa.states().get_nowait().position is Position.HEAD

    dfa.emit(Event.PREDECESSOR_CONNECT)
    assert dfa.states().get_nowait().position is Position.MIDDLE


def test_illegal_transitions():
    dfa1 = NodeDFA()
    with pytest.raises(IllegalTransitionError):
        dfa1.emit(Event.PREDECESSOR_CONNECT)
    with pytest.raises(IllegalTransitionError):
        dfa1.emit(Event.SUCCESSOR_CONNECT)

    dfa2 = NodeDFA()
    dfa2.emit(Event.ROLE_READER)
    assert dfa2.states().get_nowait().role is Role.READER
    with pytest.raises(IllegalTransitionError):
        dfa2.emit(Event.PREDECESSOR_CONNECT)

    dfa3 = NodeDFA()
    dfa3.emit(Event.ROLE_CONFIRMER)
    assert dfa3.states().get_nowait().role is Role.CONFIRMER
    with pytest.raises(IllegalTransitionError):
        dfa3.emit(Event.SUCCESSOR_CONNECT)


def test_illegal_transition_leaves_no_state():
    dfa = NodeDFA()
    with pytest.raises(IllegalTransitionError) as info:
        dfa.emit(Event.PREDECESSOR_CONNECT)
    assert str(info.value) == "illegal transition: PredecessorConnect(Single; ReaderConfirmer)"
    assert info.value.state == NodeState(Position.SINGLE, Role.READER_CONFIRMER)
    with pytest.raises(queue.Empty):
        dfa.states().get_nowait()


def test_state_string():
    assert str(NodeState(Position.MIDDLE, Role.RELAY)) == "(Middle; Relay)"
    assert str(NodeState(Position.HEAD, Role.RELAY, illegal=True)) == "(Illegal)"


def test_disconnects_return_to_single():
    dfa = NodeDFA()
    dfa.emit(Event.ROLE_RELAY)
    dfa.emit(Event.SUCCESSOR_CONNECT)
    dfa.emit(Event.PREDECESSOR_CONNECT)
    dfa.emit(Event.SUCCESSOR_DISCONNECT)
    dfa.emit(Event.PREDECESSOR_DISCONNECT)
    states = [dfa.states().get_nowait() for _ in range(5)]
    assert [s.position for s in states] == [
        Position.SINGLE,
        Position.HEAD,
        Position.MIDDLE,
        Position.TAIL,
        Position.SINGLE,
    ]
    with pytest.raises(IllegalTransitionError):
        dfa.emit(Event.PREDECESSOR_DISCONNECT)


def test_role_limits_by_position():
    dfa = NodeDFA()
    dfa.emit(Event.ROLE_RELAY)
    dfa.emit(Event.SUCCESSOR_CONNECT)
    with pytest.raises(IllegalTransitionError):
        dfa.emit(Event.ROLE_CONFIRMER)
    with pytest.raises(IllegalTransitionError):
        dfa.emit(Event.ROLE_READER_CONFIRMER)
    dfa.emit(Event.ROLE_READER)
    assert dfa.last_state == NodeState(Position.HEAD, Role.READER)