import socket

import pytest

from reactornet.channel import Channel, Event
from reactornet.poller import USE_POLL_ENV, ChannelState, Poller


class _Loop:
    def __init__(self) -> None:
        self.poller: Poller | None = None

    def update_channel(self, channel):
        self.poller.update_channel(channel)

    def remove_channel(self, channel):
        self.poller.remove_channel(channel)


@pytest.fixture(params=["default", "poll"])
def setup(request, monkeypatch):
    if request.param == "poll":
        monkeypatch.setenv(USE_POLL_ENV, "1")
    else:
        monkeypatch.delenv(USE_POLL_ENV, raising=False)
    loop = _Loop()
    poller = Poller(loop)
    loop.poller = poller
    a, b = socket.socketpair()
    a.setblocking(False)
    b.setblocking(False)
    yield loop, poller, a, b
    poller.close()
    a.close()
    b.close()


def test_new_channel_is_added(setup):
    loop, poller, a, b = setup
    channel = Channel(loop, b.fileno())
    assert not poller.has_channel(channel)
    channel.enable_reading()
    assert poller.has_channel(channel)
    assert channel.index == ChannelState.ADDED


def test_poll_reports_readable_channel(setup):
    loop, poller, a, b = setup
    channel = Channel(loop, b.fileno())
    channel.enable_reading()
    a.sendall(b"x")
    when, active = poller.poll(1000)
    assert active == [channel]
    assert channel.revents & Event.IN
    assert when.is_valid()


def test_poll_timeout_returns_nothing(setup):
    loop, poller, a, b = setup
    channel = Channel(loop, b.fileno())
    channel.enable_reading()
    when, active = poller.poll(0)
    assert active == []
    assert when.is_valid()


def test_poll_reports_writable_channel(setup):
    loop, poller, a, b = setup
    channel = Channel(loop, a.fileno())
    channel.enable_writing()
    _, active = poller.poll(1000)
    assert active == [channel]
    assert channel.revents & Event.OUT


def test_disable_all_marks_deleted_but_keeps_channel(setup):
    loop, poller, a, b = setup
    channel = Channel(loop, b.fileno())
    channel.enable_reading()
    channel.disable_all()
    assert channel.index == ChannelState.DELETED
    assert poller.has_channel(channel)
    a.sendall(b"x")
    _, active = poller.poll(50)
    assert channel not in active


def test_reenable_after_delete(setup):
    loop, poller, a, b = setup
    channel = Channel(loop, b.fileno())
    channel.enable_reading()
    channel.disable_all()
    channel.enable_reading()
    assert channel.index == ChannelState.ADDED
    a.sendall(b"x")
    _, active = poller.poll(1000)
    assert active == [channel]


def test_remove_resets_state(setup):
    loop, poller, a, b = setup
    channel = Channel(loop, b.fileno())
    channel.enable_reading()
    channel.remove()
    assert channel.index == ChannelState.NEW
    assert not poller.has_channel(channel)


def test_has_channel_checks_identity(setup):
    loop, poller, a, b = setup
    channel = Channel(loop, b.fileno())
    channel.enable_reading()
    other = Channel(loop, b.fileno())
    assert not poller.has_channel(other)