"""A thin owner of a listening or connected TCP socket."""

from __future__ import annotations

import socket

from reactornet import log
from reactornet.inet_address import InetAddress

LISTEN_BACKLOG = 1024


class Socket:
    """Owns a socket object and exposes the operations the server needs."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock

    @property
    def fd(self) -> int:
        return self.sock.fileno()

    def bind_address(self, local_addr: InetAddress) -> None:
        """Bind to ``local_addr``; a failure is fatal."""
        try:
            self.sock.bind(local_addr.sockaddr())
        except OSError:
            log.fatal("bind sockfd:", self.fd, " fail")

    def listen(self) -> None:
        """Start listening; a failure is fatal."""
        try:
            self.sock.listen(LISTEN_BACKLOG)
        except OSError:
            log.fatal("listen sockfd: ", self.fd, " fail")

    def accept(self) -> tuple[socket.socket, InetAddress]:
        """Accept one connection as a non-blocking socket with its peer address.

        Logs and re-raises the OSError when nothing can be accepted.
        """
        try:
            conn, addr = self.sock.accept()
        except OSError:
            log.error("accept4() failed")
            raise
        conn.setblocking(False)
        return conn, InetAddress.from_sockaddr(addr)

    def shutdown_write(self) -> None:
        """Close the writing half; reading stays possible."""
        try:
            self.sock.shutdown(socket.SHUT_WR)
        except OSError:
            log.error("shutdownWrite error")

    def set_tcp_no_delay(self, on: bool) -> None:
        self.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, int(on))

    def set_reuse_addr(self, on: bool) -> None:
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, int(on))

    def set_reuse_port(self, on: bool) -> None:
        if hasattr(socket, "SO_REUSEPORT"):
            self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, int(on))

    def set_keep_alive(self, on: bool) -> None:
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, int(on))

    def close(self) -> None:
        self.sock.close()

    def __enter__(self) -> Socket:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_nonblocking() -> Socket:
    """Create a non-blocking IPv4 TCP socket; a failure is fatal."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    except OSError as exc:
        log.fatal("listen socket create err ", exc.errno)
        raise
    sock.setblocking(False)
    return Socket(sock)