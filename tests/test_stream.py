import queue
import threading

import pytest

from chainboard.chain.stream import StreamCancelled, StreamError, Supervisor


class FakeStream:
    def __init__(self, send_error=None, recv_error=None):
        self.send_error = send_error
        self.recv_error = recv_error
        self.sent = queue.Queue()
        self.incoming = queue.Queue()

    def send(self, item):
        if self.send_error is not None:
            raise self.send_error
        self.sent.put(item)

    def recv(self):
        if self.recv_error is not None:
            raise self.recv_error
        return self.incoming.get()


def run_in_thread(supervisor, stream, stop):
    result = {}

    def target():
        try:
            supervisor.run(stream, stop)
        except BaseException as exc:
            result["error"] = exc

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, result


def test_send_receive_success_then_stop():
    out, inbound = queue.Queue(1), queue.Queue(1)
    supervisor = Supervisor(out, inbound)
    stream = FakeStream()
    stop = threading.Event()
    thread, result = run_in_thread(supervisor, stream, stop)

    stream.incoming.put("ok")
    out.put(42)
    assert inbound.get(timeout=2) == "ok"
    assert stream.sent.get(timeout=2) == 42

    stop.set()
    thread.join(2)
    assert not thread.is_alive()
    assert isinstance(result["error"], StreamCancelled)
    assert supervisor.dropped_message() is None


def test_received_items_keep_their_order():
    out, inbound = queue.Queue(), queue.Queue()
    supervisor = Supervisor(out, inbound)
    stream = FakeStream()
    stop = threading.Event()
    thread, _ = run_in_thread(supervisor, stream, stop)
    for word in ("a", "b", "c"):
        stream.incoming.put(word)
    got = [inbound.get(timeout=2) for _ in range(3)]
    stop.set()
    thread.join(2)
    assert got == ["a", "b", "c"]


def test_send_failure():
    out, inbound = queue.Queue(1), queue.Queue(1)
    supervisor = Supervisor(out, inbound)
    stream = FakeStream(send_error=RuntimeError("sendfail"))
    stream.incoming = queue.Queue()
    thread, result = run_in_thread(supervisor, stream, threading.Event())

    out.put(7)
    thread.join(2)
    error = result["error"]
    assert isinstance(error, StreamError)
    assert not isinstance(error, StreamCancelled)
    assert "failed to send message" in str(error)
    assert str(error.__cause__) == "sendfail"
    assert supervisor.dropped_message() == 7


def test_receive_failure():
    out, inbound = queue.Queue(1), queue.Queue(1)
    supervisor = Supervisor(out, inbound)
    stream = FakeStream(recv_error=RuntimeError("recvfail"))
    thread, result = run_in_thread(supervisor, stream, threading.Event())

    out.put(8)
    thread.join(2)
    error = result["error"]
    assert not isinstance(error, StreamCancelled)
    assert "failed to receive confirmation" in str(error)
    assert str(error.__cause__) == "recvfail"


def test_already_stopped_run_raises_cancelled():
    supervisor = Supervisor(queue.Queue(), queue.Queue())
    stop = threading.Event()
    stop.set()
    with pytest.raises(StreamCancelled):
        supervisor.run(FakeStream(), stop)