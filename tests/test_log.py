import errno
import os
import re

import pytest

from reactornet import log
from reactornet.log import FatalLogError, Logger, LogLevel


@pytest.fixture
def captured():
    records = []
    log.set_output(records.append)
    try:
        yield records
    finally:
        log.set_output(None)
        log.set_flush(None)
        log.set_log_level(LogLevel.INFO)


def test_source_basename_strips_directories():
    assert log.source_basename("2022/10/26/test.log") == "test.log"
    assert log.source_basename("plain.py") == "plain.py"


def test_errno_message_matches_system():
    assert log.errno_message(errno.ENOENT) == os.strerror(errno.ENOENT)


def test_default_level_is_info(captured):
    assert log.log_level() is LogLevel.INFO


def test_info_record_layout(captured):
    log.info("Hello, ", 3, " abc...xyz")
    assert len(captured) == 1
    record = captured[0]
    assert re.match(rb"^\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}\.\d{6} INFO  ", record)
    assert b"INFO  Hello, 3 abc...xyz - test_log.py:" in record
    assert re.search(rb" - test_log\.py:\d+\n$", record)


def test_debug_suppressed_at_info(captured):
    log.debug("debug")
    assert captured == []
    assert log.log_level() is LogLevel.INFO


def test_debug_includes_function_name(captured):
    log.set_log_level(LogLevel.DEBUG)
    log.debug("hello")
    assert len(captured) == 1
    assert b"DEBUG test_debug_includes_function_name hello - " in captured[0]


def test_info_suppressed_above_level_but_warn_always_written(captured):
    log.set_log_level(LogLevel.ERROR)
    log.info("info")
    log.warn("warn")
    log.error("error")
    assert len(captured) == 2
    assert b"WARN  warn" in captured[0]
    assert b"ERROR error" in captured[1]


def test_logger_direct_use(captured):
    logger = Logger("a/b/c.cpp", 42, LogLevel.WARN)
    logger.stream << "x"
    logger.finish()
    assert captured[0].endswith(b"WARN  x - c.cpp:42\n")


def test_logger_with_function_name(captured):
    with Logger("f.cpp", 1, LogLevel.DEBUG, "handler") as stream:
        stream << "x"
    assert captured[0].endswith(b"DEBUG handler x - f.cpp:1\n")


def test_finish_writes_once(captured):
    logger = Logger("f.cpp", 7)
    logger.finish()
    logger.finish()
    assert len(captured) == 1


def test_fatal_flushes_and_raises(captured):
    flushes = []
    log.set_flush(lambda: flushes.append(True))
    with pytest.raises(FatalLogError):
        log.fatal("boom")
    assert flushes == [True]
    assert b"FATAL boom" in captured[0]


def test_log_with_explicit_level(captured):
    log.log(LogLevel.ERROR, "bad ", 7)
    assert b"ERROR bad 7 - test_log.py:" in captured[0]