"""I/O readiness polling over the registered channels (epoll, or poll as fallback)."""

from __future__ import annotations

import errno
import os
import select
from enum import IntEnum
from typing import Any

from reactornet import log
from reactornet.channel import Channel, Event
from reactornet.timestamp import Timestamp

INIT_EVENT_LIST_SIZE = 16
USE_POLL_ENV = "REACTORNET_USE_POLL"


class ChannelState(IntEnum):
    """Where a channel stands with the poller; stored in ``Channel.index``."""

    NEW = -1
    ADDED = 1
    DELETED = 2


class _EpollBackend:
    def __init__(self) -> None:
        self._epoll = select.epoll()
        self._max_events = INIT_EVENT_LIST_SIZE

    def register(self, fd: int, mask: int) -> None:
        self._epoll.register(fd, mask)

    def modify(self, fd: int, mask: int) -> None:
        self._epoll.modify(fd, mask)

    def unregister(self, fd: int) -> None:
        self._epoll.unregister(fd)

    def poll(self, timeout_ms: int) -> list[tuple[int, int]]:
        timeout = -1 if timeout_ms < 0 else timeout_ms / 1000
        events = self._epoll.poll(timeout, self._max_events)
        if len(events) == self._max_events:
            self._max_events *= 2
        return events

    def close(self) -> None:
        self._epoll.close()


class _PollBackend:
    def __init__(self) -> None:
        self._poll = select.poll()

    def register(self, fd: int, mask: int) -> None:
        self._poll.register(fd, mask)

    def modify(self, fd: int, mask: int) -> None:
        self._poll.modify(fd, mask)

    def unregister(self, fd: int) -> None:
        self._poll.unregister(fd)

    def poll(self, timeout_ms: int) -> list[tuple[int, int]]:
        return self._poll.poll(timeout_ms)

    def close(self) -> None:
        pass


def _new_backend() -> _EpollBackend | _PollBackend:
    if os.environ.get(USE_POLL_ENV) or not hasattr(select, "epoll"):
        return _PollBackend()
    return _EpollBackend()


class Poller:
    """Tracks channels by fd and reports which of them are ready."""

    def __init__(self, loop: Any) -> None:
        self.owner_loop = loop
        self._channels: dict[int, Channel] = {}
        self._backend = _new_backend()

    def poll(self, timeout_ms: int) -> tuple[Timestamp, list[Channel]]:
        """Wait up to ``timeout_ms`` and return the time and the ready channels."""
        try:
            events = self._backend.poll(timeout_ms)
        except OSError as exc:
            now = Timestamp.now()
            if exc.errno != errno.EINTR:
                log.error("Poller::poll() failed: ", os.strerror(exc.errno or 0))
            return now, []
        now = Timestamp.now()
        if not events:
            log.debug("timeout!")
            return now, []
        active = []
        for fd, revents in events:
            channel = self._channels.get(fd)
            if channel is None:
                continue
            channel.revents = Event(revents)
            active.append(channel)
        return now, active

    def update_channel(self, channel: Channel) -> None:
        """Register, modify or unregister ``channel`` according to its events."""
        index = channel.index
        if index in (ChannelState.NEW, ChannelState.DELETED):
            if index == ChannelState.NEW:
                self._channels[channel.fd] = channel
            channel.index = ChannelState.ADDED
            self._update("add", channel)
        elif channel.is_none_event():
            self._update("del", channel)
            channel.index = ChannelState.DELETED
        else:
            self._update("mod", channel)

    def remove_channel(self, channel: Channel) -> None:
        """Forget ``channel`` entirely."""
        self._channels.pop(channel.fd, None)
        if channel.index == ChannelState.ADDED:
            self._update("del", channel)
        channel.index = ChannelState.NEW

    def has_channel(self, channel: Channel) -> bool:
        return self._channels.get(channel.fd) is channel

    def _update(self, operation: str, channel: Channel) -> None:
        mask = int(channel.events)
        try:
            if operation == "add":
                self._backend.register(channel.fd, mask)
            elif operation == "mod":
                self._backend.modify(channel.fd, mask)
            else:
                self._backend.unregister(channel.fd)
        except (OSError, KeyError) as exc:
            code = getattr(exc, "errno", None)
            if operation == "del":
                log.error("epoll_ctl() del error:", code)
            else:
                log.fatal("epoll_ctl add/mod error:", code)

    def close(self) -> None:
        self._backend.close()