"""Accepts new TCP connections on a listening socket in the base loop."""

from __future__ import annotations

import errno
import os
import socket
from collections.abc import Callable

from reactornet import log
from reactornet.channel import Channel
from reactornet.inet_address import InetAddress
from reactornet.sockets import create_nonblocking
from reactornet.timestamp import Timestamp

NewConnectionCallback = Callable[[socket.socket, InetAddress], object]


def _open_idle() -> int:
    return os.open(os.devnull, os.O_RDONLY)


class Acceptor:
    """Listens on an address and hands each accepted socket to a callback."""

    def __init__(self, loop, listen_addr: InetAddress, reuseport: bool) -> None:
        self.loop = loop
        self._socket = create_nonblocking()
        self._channel = Channel(loop, self._socket.fd)
        self.new_connection_callback: NewConnectionCallback | None = None
        self._listening = False
        self._idle_fd: int | None = _open_idle()
        log.debug("Acceptor create nonblocking socket, [fd = ", self._channel.fd, "]")
        self._socket.set_reuse_addr(reuseport)
        self._socket.set_reuse_port(True)
        self._socket.bind_address(listen_addr)
        self._channel.read_callback = self._handle_read

    @property
    def listening(self) -> bool:
        return self._listening

    @property
    def local_address(self) -> InetAddress:
        """The address the listening socket is bound to."""
        return InetAddress.from_sockaddr(self._socket.sock.getsockname())

    def listen(self) -> None:
        """Start listening and watch for incoming connections."""
        self._listening = True
        self._socket.listen()
        self._channel.enable_reading()

    def _handle_read(self, receive_time: Timestamp) -> None:
        try:
            conn, peer_addr = self._socket.accept()
        except BlockingIOError:
            return
        except OSError as exc:
            log.error("accept() failed")
            if exc.errno == errno.EMFILE:
                self._shed_connection()
            return
        if self.new_connection_callback:
            self.new_connection_callback(conn, peer_addr)
        else:
            log.debug("no newConnectionCallback() function")
            conn.close()

    def _shed_connection(self) -> None:
        """Out of descriptors: free the spare one, accept and drop one client."""
        log.error("sockfd reached limit")
        if self._idle_fd is not None:
            os.close(self._idle_fd)
            self._idle_fd = None
        try:
            conn, _ = self._socket.sock.accept()
            conn.close()
        except OSError:
            pass
        try:
            self._idle_fd = _open_idle()
        except OSError:
            self._idle_fd = None

    def close(self) -> None:
        """Stop watching the socket and release it."""
        if self._channel.is_reading() or self._channel.is_writing():
            self._channel.disable_all()
        self._channel.remove()
        self._socket.close()
        self._listening = False
        if self._idle_fd is not None:
            os.close(self._idle_fd)
            self._idle_fd = None