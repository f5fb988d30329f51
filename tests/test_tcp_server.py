import socket
import threading
import time

import pytest

from reactornet.event_loop_thread import EventLoopThread
from reactornet.inet_address import InetAddress
from reactornet.log import FatalLogError
from reactornet.tcp_server import ServerOption, TcpServer


@pytest.fixture
def loop():
    thread = EventLoopThread()
    running = thread.start_loop()
    yield running
    thread.close()


def _call_in(loop, fn):
    done = threading.Event()

    def call():
        try:
            fn()
        finally:
            done.set()

    loop.run_in_loop(call)
    assert done.wait(5)


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_null_loop_is_fatal():
    with pytest.raises(FatalLogError):
        TcpServer(None, InetAddress(0, "127.0.0.1"), "Srv")


@pytest.mark.parametrize("threads", [0, 2])
def test_echo_and_connection_events(loop, threads):
    server = TcpServer(loop, InetAddress(0, "127.0.0.1"), "Srv", ServerOption.REUSE_PORT)
    server.set_thread_num(threads)
    events = []

    def on_connection(conn):
        events.append((conn.name, conn.connected()))

    def on_message(conn, buf, receive_time):
        conn.send(buf.retrieve_all_as_bytes())

    server.connection_callback = on_connection
    server.message_callback = on_message
    server.start()
    assert server.started
    assert _wait_for(lambda: server.acceptor.listening)
    port = server.acceptor.local_address.to_port()
    try:
        with socket.create_connection(("127.0.0.1", port), timeout=5) as client:
            client.sendall(b"hello")
            assert client.recv(16) == b"hello"
        assert _wait_for(lambda: len(events) == 2)
        expected_name = f"Srv-{server.ip_port}#1"
        assert events == [(expected_name, True), (expected_name, False)]
        assert _wait_for(lambda: not server.connections)
    finally:
        _call_in(loop, server.close)


def test_connections_spread_over_sub_loops(loop):
    server = TcpServer(loop, InetAddress(0, "127.0.0.1"), "Pool")
    server.set_thread_num(2)
    loops = []
    server.connection_callback = lambda conn: conn.connected() and loops.append(conn.loop)
    server.start()
    assert _wait_for(lambda: server.acceptor.listening)
    port = server.acceptor.local_address.to_port()
    clients = [socket.create_connection(("127.0.0.1", port), timeout=5) for _ in range(2)]
    try:
        assert _wait_for(lambda: len(loops) == 2)
        assert loops[0] is not loops[1]
        assert all(item is not loop for item in loops)
        assert len(server.connections) == 2
    finally:
        for client in clients:
            client.close()
        _call_in(loop, server.close)