"""A multi-threaded echo server that logs asynchronously to rolling files."""

from __future__ import annotations

import argparse
import os
import sys

from reactornet import log
from reactornet.async_logging import AsyncLogging
from reactornet.buffer import Buffer
from reactornet.event_loop import EventLoop
from reactornet.inet_address import InetAddress
from reactornet.tcp_connection import TcpConnection
from reactornet.tcp_server import TcpServer
from reactornet.timestamp import Timestamp

ROLL_SIZE = 1000 * 1000 * 500
DEFAULT_PORT = 8088
THREAD_NUM = 4


class EchoServer:
    """Sends every received message straight back to its sender."""

    def __init__(self, loop: EventLoop, addr: InetAddress, name: str) -> None:
        self.loop = loop
        self.server = TcpServer(loop, addr, name)
        self.server.set_thread_num(THREAD_NUM)
        self.server.connection_callback = self._on_connection
        self.server.message_callback = self._on_message

    def start(self) -> None:
        self.server.start()

    def _on_connection(self, conn: TcpConnection) -> None:
        state = "UP" if conn.connected() else "DOWN"
        log.info("Connection ", state, " : ", conn.peer_address.to_ip_port())

    def _on_message(self, conn: TcpConnection, buf: Buffer, receive_time: Timestamp) -> None:
        msg = buf.retrieve_all_as_bytes()
        log.info(conn.name, " recieved ", len(msg), " at ", receive_time.to_formatted_string())
        conn.send(msg)


def main(argv: list[str] | None = None) -> int:
    """Run the echo server until interrupted."""
    parser = argparse.ArgumentParser(description="TCP echo server")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    basename = os.path.basename(sys.argv[0]) or "echo_server"
    async_log = AsyncLogging(basename, ROLL_SIZE)
    log.set_output(async_log.append)
    async_log.start()
    try:
        with EventLoop() as loop:
            server = EchoServer(loop, InetAddress(args.port), "EchoServer")
            server.start()
            try:
                loop.loop()
            except KeyboardInterrupt:
                pass
            finally:
                server.server.close()
    finally:
        log.set_output(None)
        async_log.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())