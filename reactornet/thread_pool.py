"""A fixed-size pool of worker threads fed by a bounded task queue."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable

from reactornet.thread import Thread

Task = Callable[[], object]


class ThreadPool:
    """Producer/consumer pool; with no threads, tasks run in the caller."""

    def __init__(
        self,
        name: str = "ThreadPool",
        thread_size: int = 0,
        thread_init_callback: Task | None = None,
    ) -> None:
        self.name = name
        self.thread_size = thread_size
        self.thread_init_callback = thread_init_callback
        self._lock = threading.Lock()
        self._not_full = threading.Condition(self._lock)
        self._not_empty = threading.Condition(self._lock)
        self._threads: list[Thread] = []
        self._queue: deque[Task] = deque()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start ``thread_size`` workers, or run the init callback inline if none."""
        self._running = True
        for number in range(1, self.thread_size + 1):
            worker = Thread(self._run_in_thread, f"{self.name}{number}")
            self._threads.append(worker)
            worker.start()
        if self.thread_size == 0 and self.thread_init_callback:
            self.thread_init_callback()

    def stop(self) -> None:
        """Stop accepting work and wake every waiting thread."""
        with self._lock:
            self._running = False
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def join(self) -> None:
        """Wait for all worker threads to exit."""
        for worker in self._threads:
            worker.join()

    def queue_size(self) -> int:
        with self._lock:
            return len(self._queue)

    def _is_full(self) -> bool:
        return self.thread_size > 0 and len(self._queue) >= self.thread_size

    def add(self, task: Task) -> None:
        """Queue a task, blocking while the queue is full; dropped once stopped."""
        if not self._threads:
            task()
            return
        with self._lock:
            while self._is_full() and self._running:
                self._not_full.wait()
            if not self._running:
                return
            self._queue.append(task)
            self._not_empty.notify()

    def _take(self) -> Task | None:
        with self._lock:
            while not self._queue and self._running:
                self._not_empty.wait()
            if not self._queue:
                return None
            task = self._queue.popleft()
            if self.thread_size > 0:
                self._not_full.notify()
            return task

    def _run_in_thread(self) -> None:
        try:
            if self.thread_init_callback:
                self.thread_init_callback()
            while self._running:
                task = self._take()
                if task:
                    task()
        except Exception:
            # A failing task ends this worker; the rest of the pool keeps going.
            pass

    def __enter__(self) -> ThreadPool:
        if not self._running:
            self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
        self.join()