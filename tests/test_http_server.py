import socket
import threading
import time

import pytest

from reactornet.event_loop_thread import EventLoopThread
from reactornet.http_response import HttpResponse, StatusCode
from reactornet.http_server import HttpServer, default_http_callback
from reactornet.http_request import HttpRequest
from reactornet.inet_address import InetAddress


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


def _exchange(port: int, request: bytes) -> bytes:
    with socket.create_connection(("127.0.0.1", port), timeout=5) as client:
        client.sendall(request)
        chunks = []
        while True:
            chunk = client.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def _started(loop):
    server = HttpServer(loop, InetAddress(0, "127.0.0.1"), "Http")
    server.start()
    deadline = time.monotonic() + 5
    while not server.server.acceptor.listening and time.monotonic() < deadline:
        time.sleep(0.01)
    return server, server.server.acceptor.local_address.to_port()


def test_default_callback_sets_404_and_close():
    response = HttpResponse(False)
    default_http_callback(HttpRequest(), response)
    data = response.to_bytes()
    assert data.startswith(b"HTTP/1.1 404 Not Found\r\n")
    assert b"Connection: close\r\n" in data


def test_default_response_over_the_wire(loop):
    server, port = _started(loop)
    try:
        reply = _exchange(port, b"GET / HTTP/1.1\r\nHost: a\r\n\r\n")
        assert reply == b"HTTP/1.1 404 Not Found\r\nConnection: close\r\n\r\n"
    finally:
        _call_in(loop, server.server.close)


def test_bad_request(loop):
    server, port = _started(loop)
    try:
        assert _exchange(port, b"BAD / HTTP/1.1\r\n\r\n") == b"HTTP/1.1 400 Bad Request\r\n\r\n"
    finally:
        _call_in(loop, server.server.close)


def test_custom_callback_and_http10_closes(loop):
    server, port = _started(loop)
    seen = []

    def handler(request, response):
        seen.append((request.path, request.query))
        response.status_code = StatusCode(200)
        response.status_message = "OK"
        response.add_header("X-Test", "yes")
        response.body = "hello"

    server.http_callback = handler
    try:
        reply = _exchange(port, b"GET /hello?a=1 HTTP/1.0\r\n\r\n")
        assert reply.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Connection: close\r\n" in reply
        assert b"X-Test: yes\r\n" in reply
        assert reply.endswith(b"\r\n\r\nhello")
        assert seen == [("/hello", "?a=1")]
    finally:
        _call_in(loop, server.server.close)