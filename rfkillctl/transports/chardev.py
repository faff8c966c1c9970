"""rfkill character device transport."""

from __future__ import annotations

import asyncio
import errno
import logging
import os
from typing import Union

from rfkillctl.core.errors import EventWriteError, RecordDecodeError
from rfkillctl.core.model import CHAR_DEVICE, EVENT_SIZE, Event, decode_event
from rfkillctl.transports.base import EventReader

LOGGER = logging.getLogger(__name__)

EventResult = Union[Event, OSError, RecordDecodeError]

# The device is gone or the descriptor is unusable; no later read can succeed.
_FATAL_ERRNOS = frozenset({errno.ENODEV, errno.EBADF})


class CharDeviceReader:
    """Non-blocking reader over a file descriptor, driven by the running loop."""

    def __init__(self, fd: int) -> None:
        self._fd: int | None = fd

    @classmethod
    def open(cls, path: str = CHAR_DEVICE) -> CharDeviceReader:
        return cls(os.open(path, os.O_RDONLY | os.O_NONBLOCK))

    @property
    def closed(self) -> bool:
        return self._fd is None

    async def read(self, size: int) -> bytes:
        loop = asyncio.get_running_loop()
        while True:
            if self._fd is None:
                return b""
            try:
                return os.read(self._fd, size)
            except BlockingIOError:
                await self._wait_readable(loop, self._fd)

    @staticmethod
    async def _wait_readable(loop: asyncio.AbstractEventLoop, fd: int) -> None:
        ready = loop.create_future()

        def _on_readable() -> None:
            if not ready.done():
                ready.set_result(None)

        loop.add_reader(fd, _on_readable)
        try:
            await ready
        finally:
            loop.remove_reader(fd)

    def close(self) -> None:
        if self._fd is not None:
            fd, self._fd = self._fd, None
            os.close(fd)


class EventSource:
    """Asynchronous iterator over decoded rfkill events.

    Each element is either an :class:`Event` or the exception describing why
    that read could not be decoded. Errors do not end the iteration, except
    ``ENODEV`` and ``EBADF`` which are yielded once and then end it. The
    iteration ends for good once the reader reports end of stream.
    """

    def __init__(self, reader: EventReader) -> None:
        self._reader = reader
        self._finished = False

    @classmethod
    def open(cls, path: str = CHAR_DEVICE) -> EventSource:
        LOGGER.debug("Opening rfkill event stream at %s", path)
        return cls(CharDeviceReader.open(path))

    @property
    def finished(self) -> bool:
        return self._finished

    def __aiter__(self) -> EventSource:
        return self

    async def __anext__(self) -> EventResult:
        if self._finished:
            raise StopAsyncIteration
        try:
            data = await self._reader.read(EVENT_SIZE)
        except OSError as exc:
            if exc.errno in _FATAL_ERRNOS:
                self._finished = True
                LOGGER.debug("rfkill event stream failed for good: %s", exc)
            # A failing read returns without suspending; let other tasks run.
            await asyncio.sleep(0)
            return exc
        if not data:
            self._finished = True
            LOGGER.debug("rfkill event stream ended")
            raise StopAsyncIteration
        try:
            return decode_event(data)
        except RecordDecodeError as exc:
            return exc

    def close(self) -> None:
        self._finished = True
        self._reader.close()


def write_event(event: Event, path: str = CHAR_DEVICE) -> None:
    payload = event.encode()
    try:
        with open(path, "wb", buffering=0) as device:
            device.write(payload)
    except OSError as exc:
        raise EventWriteError(f"Writing {event.operation} event to {path} failed: {exc}") from exc
    LOGGER.debug("Wrote %s to %s", payload.hex(), path)
