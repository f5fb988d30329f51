"""Microsecond-resolution wall-clock timestamps."""

from __future__ import annotations

import time
from dataclasses import dataclass

MICRO_SECONDS_PER_SECOND = 1_000_000


def _split(micro_seconds: int) -> tuple[int, int]:
    """Split microseconds into whole seconds and the remainder, truncating toward zero."""
    seconds, micro = divmod(abs(micro_seconds), MICRO_SECONDS_PER_SECOND)
    if micro_seconds < 0:
        return -seconds, -micro
    return seconds, micro


@dataclass(frozen=True, order=True)
class Timestamp:
    """A point in time as microseconds since the Unix epoch."""

    micro_seconds_since_epoch: int = 0

    @staticmethod
    def now() -> Timestamp:
        """Return the current time."""
        return Timestamp(time.time_ns() // 1000)

    @staticmethod
    def invalid() -> Timestamp:
        """Return the zero timestamp, used as an 'unset' marker."""
        return Timestamp()

    def to_string(self) -> str:
        """Format as '<seconds>.<microseconds>'."""
        seconds, micro = _split(self.micro_seconds_since_epoch)
        return f"{seconds}.{micro:06d}"

    def to_formatted_string(self, show_microseconds: bool = False) -> str:
        """Format as local 'YYYY/MM/DD HH:MM:SS', optionally with '.uuuuuu'."""
        seconds, micro = _split(self.micro_seconds_since_epoch)
        tm = time.localtime(seconds)
        text = (
            f"{tm.tm_year:4d}/{tm.tm_mon:02d}/{tm.tm_mday:02d} "
            f"{tm.tm_hour:02d}:{tm.tm_min:02d}:{tm.tm_sec:02d}"
        )
        if show_microseconds:
            text += f".{micro:06d}"
        return text

    def seconds_since_epoch(self) -> int:
        """Whole seconds since the epoch."""
        return _split(self.micro_seconds_since_epoch)[0]

    def is_valid(self) -> bool:
        """True when the timestamp is after the epoch."""
        return self.micro_seconds_since_epoch > 0

    def __str__(self) -> str:
        return self.to_string()


def time_difference(high: Timestamp, low: Timestamp) -> float:
    """Seconds between two timestamps, as a float."""
    diff = high.micro_seconds_since_epoch - low.micro_seconds_since_epoch
    return diff / MICRO_SECONDS_PER_SECOND


def add_time(timestamp: Timestamp, seconds: float) -> Timestamp:
    """Return ``timestamp`` moved forward by ``seconds``."""
    delta = int(seconds * MICRO_SECONDS_PER_SECOND)
    return Timestamp(timestamp.micro_seconds_since_epoch + delta)