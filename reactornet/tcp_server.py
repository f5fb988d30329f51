"""A TCP server that accepts in a base loop and serves connections in sub-loops."""

from __future__ import annotations

import socket
import threading
from collections.abc import Callable
from enum import Enum
from functools import partial

from reactornet import log
from reactornet.acceptor import Acceptor
from reactornet.event_loop_thread_pool import EventLoopThreadPool
from reactornet.inet_address import InetAddress
from reactornet.tcp_connection import (
    ConnectionCallback,
    MessageCallback,
    TcpConnection,
    WriteCompleteCallback,
    default_connection_callback,
    default_message_callback,
)

ThreadInitCallback = Callable[[object], object]


class ServerOption(Enum):
    NO_REUSE_PORT = 0
    REUSE_PORT = 1


class TcpServer:
    """Register callbacks, call ``start`` and run the base loop."""

    def __init__(
        self,
        loop,
        listen_addr: InetAddress,
        name: str,
        option: ServerOption = ServerOption.NO_REUSE_PORT,
    ) -> None:
        if loop is None:
            log.fatal("mainLoop is null!")
        self.loop = loop
        self.ip_port = listen_addr.to_ip_port()
        self.name = name
        self.acceptor = Acceptor(loop, listen_addr, option is ServerOption.REUSE_PORT)
        self.thread_pool = EventLoopThreadPool(loop, name)
        self.connection_callback: ConnectionCallback = default_connection_callback
        self.message_callback: MessageCallback = default_message_callback
        self.write_complete_callback: WriteCompleteCallback | None = None
        self.thread_init_callback: ThreadInitCallback | None = None
        self._started = False
        self._start_lock = threading.Lock()
        self._next_conn_id = 1
        self.connections: dict[str, TcpConnection] = {}
        self.acceptor.new_connection_callback = self._new_connection

    @property
    def started(self) -> bool:
        return self._started

    def set_thread_num(self, num_threads: int) -> None:
        """Number of sub-loop threads; zero serves everything on the base loop."""
        self.thread_pool.num_threads = num_threads

    def start(self) -> None:
        """Start the sub-loops and begin listening; later calls do nothing."""
        with self._start_lock:
            if self._started:
                return
            self._started = True
        self.thread_pool.start(self.thread_init_callback)
        self.loop.run_in_loop(self.acceptor.listen)

    def _new_connection(self, sock: socket.socket, peer_addr: InetAddress) -> None:
        io_loop = self.thread_pool.get_next_loop()
        conn_name = f"{self.name}-{self.ip_port}#{self._next_conn_id}"
        self._next_conn_id += 1
        log.info(
            "TcpServer::newConnection [", self.name, "] - new connection [",
            conn_name, "] from ", peer_addr.to_ip_port(),
        )
        try:
            local_addr = InetAddress.from_sockaddr(sock.getsockname())
        except OSError:
            log.error("sockets::getLocalAddr() failed")
            local_addr = InetAddress(0)
        conn = TcpConnection(io_loop, conn_name, sock, local_addr, peer_addr)
        self.connections[conn_name] = conn
        conn.connection_callback = self.connection_callback
        conn.message_callback = self.message_callback
        conn.write_complete_callback = self.write_complete_callback
        conn.close_callback = self._remove_connection
        io_loop.run_in_loop(conn.connect_established)

    def _remove_connection(self, conn: TcpConnection) -> None:
        self.loop.run_in_loop(partial(self._remove_connection_in_loop, conn))

    def _remove_connection_in_loop(self, conn: TcpConnection) -> None:
        log.info(
            "TcpServer::removeConnectionInLoop [", self.name, "] - connection ", conn.name
        )
        self.connections.pop(conn.name, None)
        conn.loop.queue_in_loop(conn.connect_destroyed)

    def close(self) -> None:
        """Destroy every connection, stop listening and stop the sub-loops."""
        connections, self.connections = self.connections, {}
        for conn in connections.values():
            conn.loop.run_in_loop(conn.connect_destroyed)
        self.acceptor.close()
        self.thread_pool.close()

    def __enter__(self) -> TcpServer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()