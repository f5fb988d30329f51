import socket
import threading

import pytest

from reactornet.acceptor import Acceptor
from reactornet.event_loop_thread import EventLoopThread
from reactornet.inet_address import InetAddress


@pytest.fixture
def loop():
    thread = EventLoopThread()
    running = thread.start_loop()
    yield running
    thread.close()


def _call_in(loop, fn):
    done = threading.Event()
    box = []

    def call():
        try:
            box.append(fn())
        finally:
            done.set()

    loop.run_in_loop(call)
    assert done.wait(5)
    return box[0] if box else None


def test_accepts_and_reports_peer(loop):
    acceptor = Acceptor(loop, InetAddress(0, "127.0.0.1"), True)
    got = []
    accepted = threading.Event()

    def on_new(conn, peer):
        got.append(peer)
        conn.close()
        accepted.set()

    acceptor.new_connection_callback = on_new
    assert acceptor.listening is False
    _call_in(loop, acceptor.listen)
    assert acceptor.listening is True
    port = acceptor.local_address.to_port()
    assert port > 0
    with socket.create_connection(("127.0.0.1", port), timeout=5) as client:
        assert accepted.wait(5)
        assert got[0].to_ip() == "127.0.0.1"
        assert got[0].to_port() == client.getsockname()[1]
    _call_in(loop, acceptor.close)
    assert acceptor.listening is False


def test_without_callback_connection_is_closed(loop):
    acceptor = Acceptor(loop, InetAddress(0, "127.0.0.1"), False)
    _call_in(loop, acceptor.listen)
    port = acceptor.local_address.to_port()
    with socket.create_connection(("127.0.0.1", port), timeout=5) as client:
        client.settimeout(5)
        assert client.recv(16) == b""
    _call_in(loop, acceptor.close)