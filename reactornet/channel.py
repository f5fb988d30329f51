"""A file descriptor, the events wanted on it, and the handlers for them."""

from __future__ import annotations

import weakref
from collections.abc import Callable
from enum import IntFlag
from typing import Any, Protocol

from reactornet import log
from reactornet.timestamp import Timestamp


class Event(IntFlag):
    """Readiness bits; the values are those used by epoll and poll."""

    NONE = 0
    IN = 0x001
    PRI = 0x002
    OUT = 0x004
    ERR = 0x008
    HUP = 0x010
    READ = IN | PRI
    WRITE = OUT


class _Loop(Protocol):
    def update_channel(self, channel: Channel) -> None: ...

    def remove_channel(self, channel: Channel) -> None: ...


class Channel:
    """Dispatches the events a poller reports on ``fd`` to the matching callback."""

    def __init__(self, loop: _Loop, fd: int) -> None:
        self.loop = loop
        self.fd = fd
        self.events = Event.NONE
        self.revents = Event.NONE
        self.index = -1
        self._tie: weakref.ref[Any] | None = None
        self.read_callback: Callable[[Timestamp], object] | None = None
        self.write_callback: Callable[[], object] | None = None
        self.close_callback: Callable[[], object] | None = None
        self.error_callback: Callable[[], object] | None = None

    def tie(self, owner: object) -> None:
        """Only handle events while ``owner`` is still alive."""
        self._tie = weakref.ref(owner)

    def handle_event(self, receive_time: Timestamp) -> None:
        if self._tie is not None:
            guard = self._tie()
            if guard is None:
                return
            self._handle_event_with_guard(receive_time)
        else:
            self._handle_event_with_guard(receive_time)

    def _handle_event_with_guard(self, receive_time: Timestamp) -> None:
        revents = int(self.revents)
        if revents & Event.HUP and not revents & Event.IN:
            if self.close_callback:
                self.close_callback()
        if revents & Event.ERR:
            log.error("the fd = ", self.fd)
            if self.error_callback:
                self.error_callback()
        if revents & Event.READ:
            log.debug("channel have read events, the fd = ", self.fd)
            if self.read_callback:
                self.read_callback(receive_time)
        if revents & Event.OUT:
            if self.write_callback:
                self.write_callback()

    def _update(self) -> None:
        self.loop.update_channel(self)

    def enable_reading(self) -> None:
        self.events |= Event.READ
        self._update()

    def disable_reading(self) -> None:
        self.events &= ~Event.READ
        self._update()

    def enable_writing(self) -> None:
        self.events |= Event.WRITE
        self._update()

    def disable_writing(self) -> None:
        self.events &= ~Event.WRITE
        self._update()

    def disable_all(self) -> None:
        self.events = Event.NONE
        self._update()

    def is_none_event(self) -> bool:
        return self.events == Event.NONE

    def is_writing(self) -> bool:
        return bool(self.events & Event.WRITE)

    def is_reading(self) -> bool:
        return bool(self.events & Event.READ)

    def remove(self) -> None:
        """Unregister this channel from its loop."""
        self.loop.remove_channel(self)