"""A minimal HTTP/1.x server on top of TcpServer."""

from __future__ import annotations

from collections.abc import Callable

from reactornet import log
from reactornet.buffer import Buffer
from reactornet.http_context import HttpContext
from reactornet.http_request import HttpRequest, Version
from reactornet.http_response import HttpResponse, StatusCode
from reactornet.inet_address import InetAddress
from reactornet.tcp_connection import TcpConnection
from reactornet.tcp_server import ServerOption, TcpServer
from reactornet.timestamp import Timestamp

HttpCallback = Callable[[HttpRequest, HttpResponse], object]

_BAD_REQUEST = b"HTTP/1.1 400 Bad Request\r\n\r\n"


def default_http_callback(request: HttpRequest, response: HttpResponse) -> None:
    """Answer every request with 404 Not Found and close the connection."""
    response.status_code = StatusCode(404)
    response.status_message = "Not Found"
    response.close_connection = True


class HttpServer:
    """Parses requests and lets ``http_callback`` fill in the responses."""

    def __init__(
        self,
        loop,
        listen_addr: InetAddress,
        name: str,
        option: ServerOption = ServerOption.NO_REUSE_PORT,
    ) -> None:
        self.server = TcpServer(loop, listen_addr, name, option)
        self.http_callback: HttpCallback = default_http_callback
        self.server.connection_callback = self._on_connection
        self.server.message_callback = self._on_message

    @property
    def loop(self):
        return self.server.loop

    def start(self) -> None:
        log.info(
            "HttpServer[", self.server.name, "] starts listening on ", self.server.ip_port
        )
        self.server.start()

    def _on_connection(self, conn: TcpConnection) -> None:
        if conn.connected():
            log.debug("new Connection arrived")
        else:
            log.debug("Connection closed, name = ", conn.name)

    def _on_message(self, conn: TcpConnection, buf: Buffer, receive_time: Timestamp) -> None:
        context = HttpContext()
        if not context.parse_request(buf, receive_time):
            log.info("parseRequest failed!")
            conn.send(_BAD_REQUEST)
            conn.shutdown()
        if context.got_all():
            self._on_request(conn, context.request)
            context.reset()

    def _on_request(self, conn: TcpConnection, request: HttpRequest) -> None:
        connection = request.get_header("Connection")
        close = connection == "close" or (
            request.version == Version.HTTP10 and connection != "Keep-Alive"
        )
        response = HttpResponse(close)
        self.http_callback(request, response)
        buf = Buffer()
        response.append_to_buffer(buf)
        conn.send(buf)
        if response.close_connection:
            log.debug("the server close http connection, named: ", conn.name)
            conn.shutdown()

    def __enter__(self) -> HttpServer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.server.close()