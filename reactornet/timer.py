"""A one-shot or repeating timer entry."""

from __future__ import annotations

import itertools
from collections.abc import Callable

from reactornet.timestamp import Timestamp, add_time

_sequence = itertools.count(1)


class Timer:
    """A callback due at ``expiration``; repeats every ``interval`` seconds if positive."""

    def __init__(self, callback: Callable[[], object], when: Timestamp, interval: float) -> None:
        self.callback = callback
        self.expiration = when
        self.interval = interval
        self.repeat = interval > 0.0
        self.sequence = next(_sequence)

    def run(self) -> None:
        self.callback()

    def restart(self, now: Timestamp) -> None:
        """Reschedule a repeating timer from ``now``; a one-shot timer becomes invalid."""
        if self.repeat:
            self.expiration = add_time(now, self.interval)
        else:
            self.expiration = Timestamp.invalid()