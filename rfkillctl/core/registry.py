"""Event-sourced registry of rfkill devices.

The registry owns one background task that replays the rfkill event stream
into a map of device index to :class:`TrackedDevice`. The map has its own
reader/writer lock for inserts and removals, and every entry carries a lock
of its own for block status updates, so readers of one device never wait on
updates to another.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager

from rfkillctl.core.config_loader import Settings, load_settings
from rfkillctl.core.device import TrackedDevice
from rfkillctl.core.errors import RegistryClosedError, UnknownDeviceError
from rfkillctl.core.locks import RWLock
from rfkillctl.core.model import Event, Operation
from rfkillctl.core.status import BlockStatus
from rfkillctl.transports.chardev import EventSource

LOGGER = logging.getLogger(__name__)


class DeviceEntry:
    """One tracked device and the lock guarding its current value."""

    def __init__(self, device: TrackedDevice) -> None:
        self._device = device
        self.lock = RWLock()

    @asynccontextmanager
    async def read(self) -> AsyncIterator[TrackedDevice]:
        async with self.lock.read():
            yield self._device

    async def get(self) -> TrackedDevice:
        async with self.lock.read():
            return self._device

    async def replace(self, device: TrackedDevice) -> None:
        async with self.lock.write():
            self._device = device

    async def set_block_status(self, block_status: BlockStatus) -> None:
        async with self.lock.write():
            self._device = TrackedDevice(
                index=self._device.index,
                kind=self._device.kind,
                block_status=block_status,
            )


class RegistrySnapshot:
    """Devices present when the snapshot was taken.

    Membership is fixed at snapshot time; each device's value is read under
    its entry lock when accessed, so it is at least as recent as the
    snapshot.
    """

    def __init__(self, entries: dict[int, DeviceEntry]) -> None:
        self._entries = entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, index: object) -> bool:
        return index in self._entries

    def indices(self) -> list[int]:
        return sorted(self._entries)

    async def get(self, index: int) -> TrackedDevice | None:
        entry = self._entries.get(index)
        if entry is None:
            return None
        return await entry.get()

    @asynccontextmanager
    async def read(self, index: int) -> AsyncIterator[TrackedDevice | None]:
        """Hold the device's read lock for the duration of the block."""
        entry = self._entries.get(index)
        if entry is None:
            yield None
            return
        async with entry.read() as device:
            yield device

    def __aiter__(self) -> AsyncIterator[TrackedDevice]:
        return self._iter_devices()

    async def _iter_devices(self) -> AsyncIterator[TrackedDevice]:
        for index in self.indices():
            yield await self._entries[index].get()

    def __iter__(self) -> Iterator[int]:
        return iter(self.indices())


class DeviceRegistry:
    def __init__(self, source: EventSource, errors: asyncio.Queue[Exception]) -> None:
        self._source = source
        self._errors = errors
        self._entries: dict[int, DeviceEntry] = {}
        self._lock = RWLock()
        self._closed = False
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="rfkill-registry")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    async def read(self) -> RegistrySnapshot:
        if self._closed:
            raise RegistryClosedError("Registry has been closed")
        async with self._lock.read():
            return RegistrySnapshot(dict(self._entries))

    async def join(self) -> None:
        """Wait until the update task has consumed the whole event stream."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def close(self) -> None:
        self._closed = True
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._source.close()

    async def __aenter__(self) -> DeviceRegistry:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _run(self) -> None:
        async for item in self._source:
            if isinstance(item, Event):
                await self._apply(item)
            else:
                LOGGER.warning("rfkill event stream error: %s", item)
                self._errors.put_nowait(item)
        LOGGER.debug("rfkill registry update task finished")

    async def _apply(self, event: Event) -> None:
        """Apply one event to the device map."""
        block_status = BlockStatus.from_block(event.block)

        if event.operation is Operation.ADD:
            device = TrackedDevice(index=event.index, kind=event.kind, block_status=block_status)
            async with self._lock.write():
                entry = self._entries.get(event.index)
                if entry is None:
                    self._entries[event.index] = DeviceEntry(device)
            # Snapshots share entries, so an overwrite must go through the entry.
            if entry is not None:
                await entry.replace(device)
            LOGGER.debug("Added rfkill%d (%s, %s)", event.index, event.kind, block_status)
            return

        if event.operation is Operation.DELETE:
            async with self._lock.write():
                removed = self._entries.pop(event.index, None)
            if removed is None:
                LOGGER.debug("Ignoring delete for unknown rfkill%d", event.index)
            else:
                LOGGER.debug("Removed rfkill%d", event.index)
            return

        # CHANGE and CHANGE_ALL both update the addressed index only.
        async with self._lock.read():
            entry = self._entries.get(event.index)
        if entry is None:
            LOGGER.warning("Ignoring %s for unknown rfkill%d", event.operation, event.index)
            self._errors.put_nowait(UnknownDeviceError(event.index, event.operation))
            return
        await entry.set_block_status(block_status)
        LOGGER.debug("Changed rfkill%d to %s", event.index, block_status)


async def open_registry(
    source: EventSource | None = None,
    *,
    settings: Settings | None = None,
) -> tuple[DeviceRegistry, asyncio.Queue[Exception]]:
    """Start tracking rfkill devices.

    Returns the registry and the queue on which stream errors and unknown
    change targets are reported. The caller is responsible for draining it.
    """
    if source is None:
        settings = settings or load_settings()
        source = EventSource.open(settings.char_device)

    errors: asyncio.Queue[Exception] = asyncio.Queue()
    registry = DeviceRegistry(source, errors)
    registry.start()
    return registry, errors
