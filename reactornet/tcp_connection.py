"""One established TCP connection served by an event loop."""

from __future__ import annotations

import errno
import socket
from collections.abc import Callable
from enum import Enum
from functools import partial

from reactornet import log
from reactornet.buffer import Buffer
from reactornet.channel import Channel
from reactornet.inet_address import InetAddress
from reactornet.sockets import Socket
from reactornet.timestamp import Timestamp

DEFAULT_HIGH_WATER_MARK = 64 * 1024 * 1024

ConnectionCallback = Callable[["TcpConnection"], object]
CloseCallback = Callable[["TcpConnection"], object]
WriteCompleteCallback = Callable[["TcpConnection"], object]
HighWaterMarkCallback = Callable[["TcpConnection", int], object]
MessageCallback = Callable[["TcpConnection", Buffer, Timestamp], object]


class ConnectionState(Enum):
    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2
    DISCONNECTING = 3


def default_connection_callback(conn: TcpConnection) -> None:
    """Trace the connection coming up or going down."""
    if log.log_level() <= log.LogLevel.TRACE:
        log.log(
            log.LogLevel.TRACE,
            conn.local_address.to_ip_port(), " -> ",
            conn.peer_address.to_ip_port(), " is ",
            "UP" if conn.connected() else "DOWN",
        )


def default_message_callback(conn: TcpConnection, buffer: Buffer, receive_time: Timestamp) -> None:
    """Trace and discard received data; the data is left alone when tracing is off."""
    if log.log_level() <= log.LogLevel.TRACE:
        log.log(
            log.LogLevel.TRACE,
            "receive ", buffer.readable_bytes(), " bytes: ", buffer.retrieve_all_as_string(),
        )


def _to_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class TcpConnection:
    """Reads into an input buffer, writes through an output buffer, reports events."""

    def __init__(
        self,
        loop,
        name: str,
        sock: socket.socket | Socket,
        local_addr: InetAddress,
        peer_addr: InetAddress,
    ) -> None:
        if loop is None:
            log.fatal("mainLoop is null!")
        self.loop = loop
        self.name = name
        self._state = ConnectionState.CONNECTING
        self._socket = sock if isinstance(sock, Socket) else Socket(sock)
        self.channel = Channel(loop, self._socket.fd)
        self.local_address = local_addr
        self.peer_address = peer_addr
        self.connection_callback: ConnectionCallback = default_connection_callback
        self.message_callback: MessageCallback = default_message_callback
        self.write_complete_callback: WriteCompleteCallback | None = None
        self.close_callback: CloseCallback | None = None
        self.high_water_mark_callback: HighWaterMarkCallback | None = None
        self.high_water_mark = DEFAULT_HIGH_WATER_MARK
        self.input_buffer = Buffer()
        self.output_buffer = Buffer()

        self.channel.read_callback = self._handle_read
        self.channel.write_callback = self._handle_write
        self.channel.close_callback = self._handle_close
        self.channel.error_callback = self._handle_error

        log.info("TcpConnection::creator[", name, "] at fd =", self.channel.fd)
        try:
            self._socket.set_keep_alive(True)
        except OSError:
            pass

    @property
    def state(self) -> ConnectionState:
        return self._state

    def connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def send(self, data: bytes | bytearray | memoryview | str | Buffer) -> None:
        """Send data, or everything readable in a Buffer; ignored unless connected."""
        if self._state is not ConnectionState.CONNECTED:
            return
        if isinstance(data, Buffer):
            payload = data.retrieve_all_as_bytes()
        else:
            payload = _to_bytes(data)
        if self.loop.is_in_loop_thread():
            self._send_in_loop(payload)
        else:
            self.loop.run_in_loop(partial(self._send_in_loop, payload))

    def _send_in_loop(self, data: bytes) -> None:
        nwrote = 0
        remaining = len(data)
        fault_error = False

        if self._state is ConnectionState.DISCONNECTED:
            log.error("disconnected, give up writing")
            return

        if not self.channel.is_writing() and self.output_buffer.readable_bytes() == 0:
            try:
                nwrote = self._socket.sock.send(data)
            except BlockingIOError:
                nwrote = 0
            except OSError as exc:
                nwrote = 0
                log.error("TcpConnection::sendInLoop")
                if exc.errno in (errno.EPIPE, errno.ECONNRESET):
                    fault_error = True
            else:
                remaining = len(data) - nwrote
                if remaining == 0 and self.write_complete_callback:
                    self.loop.queue_in_loop(partial(self.write_complete_callback, self))

        if not fault_error and remaining > 0:
            old_len = self.output_buffer.readable_bytes()
            if (
                old_len + remaining >= self.high_water_mark
                and old_len < self.high_water_mark
                and self.high_water_mark_callback
            ):
                self.loop.queue_in_loop(
                    partial(self.high_water_mark_callback, self, old_len + remaining)
                )
            self.output_buffer.append(data[nwrote:])
            if not self.channel.is_writing():
                self.channel.enable_writing()

    def shutdown(self) -> None:
        """Close the writing half once all queued output has been sent."""
        if self._state is ConnectionState.CONNECTED:
            self._state = ConnectionState.DISCONNECTING
            self.loop.run_in_loop(self._shutdown_in_loop)

    def _shutdown_in_loop(self) -> None:
        if not self.channel.is_writing():
            self._socket.shutdown_write()

    def set_high_water_mark_callback(self, cb: HighWaterMarkCallback, high_water_mark: int) -> None:
        self.high_water_mark_callback = cb
        self.high_water_mark = high_water_mark

    def connect_established(self) -> None:
        """Start reading and report the connection as up."""
        self._state = ConnectionState.CONNECTED
        self.channel.tie(self)
        self.channel.enable_reading()
        self.connection_callback(self)

    def connect_destroyed(self) -> None:
        """Unregister the channel, report the connection as down and close the socket."""
        if self._state is ConnectionState.CONNECTED:
            self._state = ConnectionState.DISCONNECTED
            self.channel.disable_all()
            self.connection_callback(self)
        self.channel.remove()
        self._socket.close()

    def _handle_read(self, receive_time: Timestamp) -> None:
        try:
            n = self.input_buffer.read_fd(self.channel.fd)
        except BlockingIOError:
            return
        except OSError:
            log.error("TcpConnection::handleRead() failed")
            self._handle_error()
            return
        if n > 0:
            self.message_callback(self, self.input_buffer, receive_time)
        else:
            self._handle_close()

    def _handle_write(self) -> None:
        if not self.channel.is_writing():
            log.error("TcpConnection fd=", self.channel.fd, " is down, no more writing")
            return
        try:
            n = self.output_buffer.write_fd(self.channel.fd)
        except OSError:
            log.error("TcpConnection::handleWrite() failed")
            return
        if n <= 0:
            log.error("TcpConnection::handleWrite() failed")
            return
        self.output_buffer.retrieve(n)
        if self.output_buffer.readable_bytes() == 0:
            self.channel.disable_writing()
            if self.write_complete_callback:
                self.loop.queue_in_loop(partial(self.write_complete_callback, self))
            if self._state is ConnectionState.DISCONNECTING:
                self._shutdown_in_loop()

    def _handle_close(self) -> None:
        self._state = ConnectionState.DISCONNECTED
        self.channel.disable_all()
        self.connection_callback(self)
        if self.close_callback:
            self.close_callback(self)

    def _handle_error(self) -> None:
        try:
            err = self._socket.sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        except OSError as exc:
            err = exc.errno
        log.error("TcpConnection::handleError name:", self.name, " - SO_ERROR:", err)