"""A named worker thread that records its native id once running."""

from __future__ import annotations

import threading
from collections.abc import Callable

from reactornet import current_thread


class Thread:
    """Runs ``func`` in a daemon thread; ``start`` returns once the tid is known."""

    _created = 0
    _created_lock = threading.Lock()

    def __init__(self, func: Callable[[], object], name: str = "") -> None:
        self._func = func
        self._started = False
        self._joined = False
        self._tid = 0
        self._thread: threading.Thread | None = None
        with Thread._created_lock:
            Thread._created += 1
            number = Thread._created
        self._name = name or f"Thread{number}"

    @property
    def started(self) -> bool:
        return self._started

    @property
    def tid(self) -> int:
        return self._tid

    @property
    def name(self) -> str:
        return self._name

    def start(self) -> None:
        """Start the thread and wait until it has recorded its tid."""
        if self._started:
            raise RuntimeError(f"thread {self._name} already started")
        self._started = True
        ready = threading.Event()

        def run() -> None:
            self._tid = current_thread.tid()
            ready.set()
            self._func()

        self._thread = threading.Thread(target=run, name=self._name, daemon=True)
        self._thread.start()
        ready.wait()

    def join(self) -> None:
        """Wait for the thread to finish."""
        if self._thread is None:
            raise RuntimeError(f"thread {self._name} was never started")
        self._joined = True
        self._thread.join()

    @staticmethod
    def num_created() -> int:
        """Number of Thread objects created so far."""
        return Thread._created