"""A thread that owns and runs one event loop."""

from __future__ import annotations

import threading
from collections.abc import Callable

from reactornet.event_loop import EventLoop
from reactornet.thread import Thread

ThreadInitCallback = Callable[[EventLoop], object]


class EventLoopThread:
    """Starts a thread, creates an EventLoop inside it and runs that loop."""

    def __init__(self, callback: ThreadInitCallback | None = None, name: str = "") -> None:
        self._callback = callback
        self._loop: EventLoop | None = None
        self._error: BaseException | None = None
        self._exiting = False
        self._cond = threading.Condition()
        self._thread = Thread(self._thread_func, name)

    @property
    def name(self) -> str:
        return self._thread.name

    @property
    def loop(self) -> EventLoop | None:
        """The running loop, or None before start and after the loop has ended."""
        with self._cond:
            return self._loop

    def start_loop(self) -> EventLoop:
        """Start the thread and return its loop once the loop exists."""
        self._thread.start()
        with self._cond:
            while self._loop is None and self._error is None:
                self._cond.wait()
            if self._error is not None:
                raise RuntimeError(
                    f"event loop thread {self.name} failed to start"
                ) from self._error
            return self._loop

    def _thread_func(self) -> None:
        loop = EventLoop()
        try:
            if self._callback:
                self._callback(loop)
        except BaseException as exc:
            with self._cond:
                self._error = exc
                self._cond.notify_all()
            loop.close()
            return
        with self._cond:
            self._loop = loop
            self._cond.notify_all()
        try:
            loop.loop()
        finally:
            with self._cond:
                self._loop = None
            loop.close()

    def close(self) -> None:
        """Stop the loop if it is running and wait for the thread to finish."""
        self._exiting = True
        with self._cond:
            loop = self._loop
        if loop is not None:
            loop.quit()
        if self._thread.started:
            self._thread.join()

    def __enter__(self) -> EventLoopThread:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()