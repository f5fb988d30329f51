import pytest

from reactornet import log
from reactornet.channel import Channel, Event
from reactornet.timestamp import Timestamp


class FakeLoop:
    def __init__(self):
        self.updates = []
        self.removed = []

    def update_channel(self, channel):
        self.updates.append(channel.events)

    def remove_channel(self, channel):
        self.removed.append(channel)


class Owner:
    pass


@pytest.fixture
def records():
    captured = []
    log.set_output(captured.append)
    yield captured
    log.set_output(None)


def _recording_channel(fd=7):
    calls = []
    channel = Channel(FakeLoop(), fd)
    channel.read_callback = lambda t: calls.append(("read", t))
    channel.write_callback = lambda: calls.append("write")
    channel.close_callback = lambda: calls.append("close")
    channel.error_callback = lambda: calls.append("error")
    return channel, calls


def test_new_channel_state():
    channel = Channel(FakeLoop(), 3)
    assert channel.fd == 3
    assert channel.is_none_event() is True
    assert channel.index == -1


def test_enable_and_disable_update_loop():
    loop = FakeLoop()
    channel = Channel(loop, 3)
    channel.enable_reading()
    assert channel.events == Event.READ
    assert channel.is_reading() is True
    channel.enable_writing()
    assert channel.is_writing() is True
    assert channel.events == Event.READ | Event.WRITE
    channel.disable_writing()
    assert channel.events == Event.READ
    channel.disable_reading()
    assert channel.is_none_event() is True
    assert loop.updates == [
        Event.READ,
        Event.READ | Event.WRITE,
        Event.READ,
        Event.NONE,
    ]


def test_disable_all():
    loop = FakeLoop()
    channel = Channel(loop, 3)
    channel.enable_reading()
    channel.enable_writing()
    channel.disable_all()
    assert channel.is_none_event() is True
    assert loop.updates[-1] == Event.NONE


def test_remove_calls_loop():
    loop = FakeLoop()
    channel = Channel(loop, 3)
    channel.remove()
    assert loop.removed == [channel]


def test_read_event_passes_receive_time():
    channel, calls = _recording_channel()
    now = Timestamp(123)
    channel.revents = Event.IN
    channel.handle_event(now)
    assert calls == [("read", now)]


def test_priority_data_counts_as_read():
    channel, calls = _recording_channel()
    channel.revents = Event.PRI
    channel.handle_event(Timestamp(1))
    assert calls == [("read", Timestamp(1))]


def test_hangup_without_input_closes():
    channel, calls = _recording_channel()
    channel.revents = Event.HUP
    channel.handle_event(Timestamp(1))
    assert calls == ["close"]


def test_hangup_with_input_reads_instead():
    channel, calls = _recording_channel()
    channel.revents = Event.HUP | Event.IN
    channel.handle_event(Timestamp(1))
    assert calls == [("read", Timestamp(1))]


def test_dispatch_order(records):
    channel, calls = _recording_channel()
    channel.revents = Event.HUP | Event.ERR | Event.OUT
    channel.handle_event(Timestamp(1))
    assert calls == ["close", "error", "write"]
    assert any(b"the fd = 7" in record for record in records)


def test_plain_int_revents():
    channel, calls = _recording_channel()
    channel.revents = int(Event.OUT)
    channel.handle_event(Timestamp(1))
    assert calls == ["write"]


def test_tied_channel_runs_while_owner_alive():
    channel, calls = _recording_channel()
    owner = Owner()
    channel.tie(owner)
    channel.revents = Event.OUT
    channel.handle_event(Timestamp(1))
    assert calls == ["write"]


def test_tied_channel_ignores_events_after_owner_gone():
    channel, calls = _recording_channel()
    owner = Owner()
    channel.tie(owner)
    del owner
    channel.revents = Event.OUT | Event.IN
    channel.handle_event(Timestamp(1))
    assert calls == []