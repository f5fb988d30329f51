"""Leveled logging with a replaceable output sink."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from enum import IntEnum

from reactornet.log_stream import LogStream
from reactornet.timestamp import Timestamp

OutputFunc = Callable[[bytes], object]
FlushFunc = Callable[[], object]


class LogLevel(IntEnum):
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5


class FatalLogError(RuntimeError):
    """Raised after a FATAL record has been written and flushed."""


def _default_output(data: bytes) -> None:
    sys.stdout.write(data.decode("utf-8", errors="replace"))


def _default_flush() -> None:
    sys.stdout.flush()


class _Config:
    level: LogLevel = LogLevel.INFO
    output: OutputFunc = staticmethod(_default_output)
    flush: FlushFunc = staticmethod(_default_flush)


def source_basename(path: str) -> str:
    """Return the part of ``path`` after the last '/'."""
    return path.rsplit("/", 1)[-1]


def errno_message(saved_errno: int) -> str:
    """Return the system message for an errno value."""
    return os.strerror(saved_errno)


def log_level() -> LogLevel:
    return _Config.level


def set_log_level(level: LogLevel) -> None:
    _Config.level = LogLevel(level)


def set_output(func: OutputFunc | None) -> None:
    """Send finished records to ``func``; None restores standard output."""
    _Config.output = func if func is not None else _default_output


def set_flush(func: FlushFunc | None) -> None:
    """Use ``func`` to flush the sink; None restores standard output."""
    _Config.flush = func if func is not None else _default_flush


class Logger:
    """One log record: a header is written on creation, the trailer by ``finish``."""

    def __init__(
        self,
        file: str,
        line: int,
        level: LogLevel = LogLevel.INFO,
        func: str | None = None,
    ) -> None:
        self.time = Timestamp.now()
        self.stream = LogStream()
        self.level = LogLevel(level)
        self.line = line
        self.basename = source_basename(file)
        self._finished = False
        self.stream << self.time.to_formatted_string(show_microseconds=True) << " "
        self.stream << self.level.name.ljust(6)
        if func:
            self.stream << func << " "

    def finish(self) -> None:
        """Write the trailer and hand the record to the output sink."""
        if self._finished:
            return
        self._finished = True
        self.stream << " - " << self.basename << ":" << self.line << "\n"
        record = self.stream.to_bytes()
        _Config.output(record)
        if self.level is LogLevel.FATAL:
            _Config.flush()
            raise FatalLogError(record.decode("utf-8", errors="replace").rstrip("\n"))

    def __enter__(self) -> LogStream:
        return self.stream

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.finish()


def _emit(level: LogLevel, args: tuple[object, ...]) -> None:
    level = LogLevel(level)
    if level <= LogLevel.INFO and _Config.level > level:
        return
    frame = sys._getframe(2)
    func = frame.f_code.co_name if level <= LogLevel.DEBUG else None
    logger = Logger(frame.f_code.co_filename, frame.f_lineno, level, func)
    for arg in args:
        logger.stream << arg
    logger.finish()


def log(level: LogLevel, *args: object) -> None:
    """Write one record made of ``args`` at ``level``."""
    _emit(level, args)


def trace(*args: object) -> None:
    _emit(LogLevel.TRACE, args)


def debug(*args: object) -> None:
    _emit(LogLevel.DEBUG, args)


def info(*args: object) -> None:
    _emit(LogLevel.INFO, args)


def warn(*args: object) -> None:
    _emit(LogLevel.WARN, args)


def error(*args: object) -> None:
    _emit(LogLevel.ERROR, args)


def fatal(*args: object) -> None:
    _emit(LogLevel.FATAL, args)