"""A pool of event-loop threads handed out round robin."""

from __future__ import annotations

from collections.abc import Callable

from reactornet.event_loop import EventLoop
from reactornet.event_loop_thread import EventLoopThread

ThreadInitCallback = Callable[[EventLoop], object]


class EventLoopThreadPool:
    """Runs ``num_threads`` sub-loops; with none, everything uses the base loop."""

    def __init__(self, base_loop: EventLoop, name: str = "") -> None:
        self.base_loop = base_loop
        self.name = name
        self.num_threads = 0
        self._started = False
        self._next = 0
        self._threads: list[EventLoopThread] = []
        self._loops: list[EventLoop] = []

    @property
    def started(self) -> bool:
        return self._started

    def start(self, callback: ThreadInitCallback | None = None) -> None:
        """Start the threads; with zero threads run ``callback`` on the base loop."""
        self._started = True
        for number in range(self.num_threads):
            thread = EventLoopThread(callback, f"{self.name}{number}")
            self._threads.append(thread)
            self._loops.append(thread.start_loop())
        if self.num_threads == 0 and callback:
            callback(self.base_loop)

    def get_next_loop(self) -> EventLoop:
        """Return the next sub-loop in turn, or the base loop if there are none."""
        if not self._loops:
            return self.base_loop
        loop = self._loops[self._next]
        self._next = (self._next + 1) % len(self._loops)
        return loop

    def get_all_loops(self) -> list[EventLoop]:
        return list(self._loops) if self._loops else [self.base_loop]

    def close(self) -> None:
        """Stop every sub-loop and wait for its thread."""
        for thread in self._threads:
            thread.close()

    def __enter__(self) -> EventLoopThreadPool:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()