"""Service layer used by CLI and future UI frontends."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from rfkillctl.core.config_loader import Settings, load_settings
from rfkillctl.core.device import LazyDevice, LoadedDevice
from rfkillctl.core.errors import DeviceSelectionError
from rfkillctl.core.model import Block, Event, Kind, Operation
from rfkillctl.core.registry import DeviceRegistry, open_registry
from rfkillctl.core.sysfs import discover_devices
from rfkillctl.transports.chardev import write_event

EventWriter = Callable[[Event, str], None]
LOGGER = logging.getLogger(__name__)


class RfkillService:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        writer: EventWriter | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.load_warnings = self.settings.warnings
        self.writer = writer or write_event

    def list_devices(self) -> list[LazyDevice]:
        return discover_devices(self.settings.sysfs_root)

    def device(self, index: int) -> LazyDevice:
        for device in self.list_devices():
            if device.index == index:
                return device
        raise DeviceSelectionError(f"No rfkill device with index {index}. Use 'rfkillctl list' to inspect devices.")

    def load_device(self, index: int) -> LoadedDevice:
        return self.device(index).load()

    def set_block(self, index: int, blocked: bool) -> Event:
        self.device(index)
        event = Event(
            index=index,
            kind=Kind.ALL,
            operation=Operation.CHANGE,
            block=Block(soft=blocked),
        )
        self._send(event)
        return event

    def set_block_kind(self, kind: Kind, blocked: bool) -> Event:
        event = Event(
            index=0,
            kind=kind,
            operation=Operation.CHANGE_ALL,
            block=Block(soft=blocked),
        )
        self._send(event)
        return event

    def block(self, index: int) -> Event:
        return self.set_block(index, True)

    def unblock(self, index: int) -> Event:
        return self.set_block(index, False)

    async def open_registry(self) -> tuple[DeviceRegistry, asyncio.Queue[Exception]]:
        return await open_registry(settings=self.settings)

    def _send(self, event: Event) -> None:
        LOGGER.info(
            "Requesting %s of %s",
            "block" if event.block.soft else "unblock",
            f"all {event.kind} devices" if event.operation.all else f"rfkill{event.index}",
        )
        self.writer(event, self.settings.char_device)
