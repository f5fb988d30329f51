"""Timers kept in expiration order for an event loop."""

from __future__ import annotations

import heapq
from collections.abc import Callable
from typing import Any

from reactornet.timer import Timer
from reactornet.timestamp import Timestamp


class TimerQueue:
    """Holds pending timers; the owning loop runs the expired ones."""

    def __init__(self, loop: Any) -> None:
        self.loop = loop
        self._timers: list[tuple[Timestamp, int, Timer]] = []
        self._calling_expired = False

    def add_timer(self, callback: Callable[[], object], when: Timestamp, interval: float) -> Timer:
        """Schedule ``callback`` at ``when``, repeating every ``interval`` seconds if positive."""
        timer = Timer(callback, when, interval)
        self.loop.run_in_loop(lambda: self._insert(timer))
        return timer

    def _insert(self, timer: Timer) -> bool:
        earliest_changed = not self._timers or timer.expiration < self._timers[0][0]
        heapq.heappush(self._timers, (timer.expiration, timer.sequence, timer))
        return earliest_changed

    def next_expiration(self) -> Timestamp | None:
        """Expiration of the earliest timer, or None when there is none."""
        return self._timers[0][0] if self._timers else None

    def handle_expired(self, now: Timestamp) -> int:
        """Run every timer due at or before ``now``; reschedule repeating ones."""
        expired = []
        while self._timers and self._timers[0][0] <= now:
            expired.append(heapq.heappop(self._timers)[2])
        if not expired:
            return 0
        self._calling_expired = True
        try:
            for timer in expired:
                timer.run()
        finally:
            self._calling_expired = False
        restart_time = Timestamp.now()
        for timer in expired:
            if timer.repeat:
                timer.restart(restart_time)
                self._insert(timer)
        return len(expired)

    def __len__(self) -> int:
        return len(self._timers)