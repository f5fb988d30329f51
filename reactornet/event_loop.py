"""One-loop-per-thread reactor: polls channels, runs timers and queued callbacks."""

from __future__ import annotations

import socket
import threading
from collections.abc import Callable

from reactornet import current_thread, log
from reactornet.channel import Channel
from reactornet.poller import Poller
from reactornet.timer import Timer
from reactornet.timer_queue import TimerQueue
from reactornet.timestamp import Timestamp, add_time

POLL_TIME_MS = 10000
_WAKEUP_BYTES = b"\x01" * 8

Functor = Callable[[], object]

_loops_lock = threading.Lock()
_loops_by_thread: dict[int, EventLoop] = {}


class EventLoop:
    """An event loop bound to the thread that created it; at most one per thread."""

    def __init__(self) -> None:
        self.thread_id = current_thread.tid()
        with _loops_lock:
            existing = _loops_by_thread.get(self.thread_id)
            if existing is None:
                _loops_by_thread[self.thread_id] = self
        if existing is not None:
            log.fatal(
                "Another EventLoop ", hex(id(existing)),
                " exists in this thread ", self.thread_id,
            )
        self._looping = False
        self._quit = False
        self._calling_pending = False
        self._closed = False
        self.poll_return_time = Timestamp.invalid()
        self._poller = Poller(self)
        self._timer_queue = TimerQueue(self)
        self._wakeup_reader, self._wakeup_writer = socket.socketpair()
        self._wakeup_reader.setblocking(False)
        self._wakeup_writer.setblocking(False)
        self._wakeup_channel = Channel(self, self._wakeup_reader.fileno())
        self._lock = threading.Lock()
        self._pending: list[Functor] = []
        log.debug("EventLoop created ", hex(id(self)), " the index is ", self.thread_id)
        self._wakeup_channel.read_callback = self._handle_read
        self._wakeup_channel.enable_reading()

    @property
    def looping(self) -> bool:
        return self._looping

    def loop(self) -> None:
        """Run until ``quit`` is called."""
        self._looping = True
        self._quit = False
        log.info("EventLoop ", hex(id(self)), " start looping")
        try:
            while not self._quit:
                self.poll_return_time, active = self._poller.poll(self._poll_timeout_ms())
                for channel in active:
                    channel.handle_event(self.poll_return_time)
                self._timer_queue.handle_expired(Timestamp.now())
                self._do_pending_functors()
        finally:
            self._looping = False

    def quit(self) -> None:
        """Ask the loop to stop after the current iteration."""
        self._quit = True
        if not self.is_in_loop_thread():
            self.wakeup()

    def run_in_loop(self, cb: Functor) -> None:
        """Run ``cb`` now if in the loop thread, otherwise queue it."""
        if self.is_in_loop_thread():
            cb()
        else:
            self.queue_in_loop(cb)

    def queue_in_loop(self, cb: Functor) -> None:
        """Queue ``cb`` to run in the loop thread after the next poll."""
        with self._lock:
            self._pending.append(cb)
        if not self.is_in_loop_thread() or self._calling_pending:
            self.wakeup()

    def wakeup(self) -> None:
        """Make a blocked poll return."""
        try:
            n = self._wakeup_writer.send(_WAKEUP_BYTES)
        except BlockingIOError:
            return  # the wakeup socket is already full, so the loop will wake
        except OSError as exc:
            log.error("EventLoop::wakeup failed: ", exc.errno)
            return
        if n != len(_WAKEUP_BYTES):
            log.error("EventLoop::wakeup writes ", n, " bytes instead of 8")

    def _handle_read(self, receive_time: Timestamp) -> None:
        try:
            while self._wakeup_reader.recv(4096):
                pass
        except BlockingIOError:
            pass
        except OSError as exc:
            log.error("EventLoop::handleRead() failed: ", exc.errno)

    def update_channel(self, channel: Channel) -> None:
        self._poller.update_channel(channel)

    def remove_channel(self, channel: Channel) -> None:
        self._poller.remove_channel(channel)

    def has_channel(self, channel: Channel) -> bool:
        return self._poller.has_channel(channel)

    def is_in_loop_thread(self) -> bool:
        return self.thread_id == current_thread.tid()

    def run_at(self, timestamp: Timestamp, cb: Functor) -> Timer:
        """Run ``cb`` once at ``timestamp``."""
        return self._timer_queue.add_timer(cb, timestamp, 0.0)

    def run_after(self, delay: float, cb: Functor) -> Timer:
        """Run ``cb`` once after ``delay`` seconds."""
        return self.run_at(add_time(Timestamp.now(), delay), cb)

    def run_every(self, interval: float, cb: Functor) -> Timer:
        """Run ``cb`` every ``interval`` seconds."""
        when = add_time(Timestamp.now(), interval)
        return self._timer_queue.add_timer(cb, when, interval)

    def _poll_timeout_ms(self) -> int:
        nxt = self._timer_queue.next_expiration()
        if nxt is None:
            return POLL_TIME_MS
        diff = nxt.micro_seconds_since_epoch - Timestamp.now().micro_seconds_since_epoch
        if diff <= 0:
            return 0
        return min(POLL_TIME_MS, -(-diff // 1000))

    def _do_pending_functors(self) -> None:
        self._calling_pending = True
        try:
            with self._lock:
                functors, self._pending = self._pending, []
            for functor in functors:
                functor()
        finally:
            self._calling_pending = False

    def close(self) -> None:
        """Release the loop's resources and free its thread for a new loop."""
        if self._closed:
            return
        self._closed = True
        self._wakeup_channel.disable_all()
        self._wakeup_channel.remove()
        self._wakeup_reader.close()
        self._wakeup_writer.close()
        self._poller.close()
        with _loops_lock:
            if _loops_by_thread.get(self.thread_id) is self:
                del _loops_by_thread[self.thread_id]

    def __enter__(self) -> EventLoop:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()