"""Public rfkillctl API.

Scripts and frontends that list, toggle or watch rfkill radios should import
from here. Names under ``rfkillctl.core`` and ``rfkillctl.transports`` may
move between releases.
"""

from __future__ import annotations

import asyncio

from rfkillctl.core.config_loader import Settings, load_settings
from rfkillctl.core.device import LazyDevice, LoadedDevice, RadioDevice, TrackedDevice
from rfkillctl.core.errors import (
    ConfigLoadError,
    ConfigValidationError,
    DeviceDiscoveryError,
    DeviceLoadError,
    DeviceSelectionError,
    EventWriteError,
    InvalidBoolValueError,
    InvalidDiscriminantError,
    InvalidHardBlockReasonsError,
    InvalidKindNameError,
    RecordDecodeError,
    RecordLengthError,
    RegistryClosedError,
    RfkillctlError,
    UnknownDeviceError,
)
from rfkillctl.core.model import Block, Event, HardBlockReasons, Kind, Operation, decode_event
from rfkillctl.core.registry import DeviceRegistry, RegistrySnapshot, open_registry
from rfkillctl.core.service import EventWriter, RfkillService
from rfkillctl.core.status import BlockStatus
from rfkillctl.transports.chardev import EventSource

__all__ = [
    "RfkillctlError",
    "RecordDecodeError",
    "RecordLengthError",
    "InvalidDiscriminantError",
    "InvalidBoolValueError",
    "InvalidKindNameError",
    "InvalidHardBlockReasonsError",
    "DeviceLoadError",
    "UnknownDeviceError",
    "RegistryClosedError",
    "ConfigLoadError",
    "ConfigValidationError",
    "DeviceDiscoveryError",
    "DeviceSelectionError",
    "EventWriteError",
    "Block",
    "BlockStatus",
    "Event",
    "HardBlockReasons",
    "Kind",
    "Operation",
    "decode_event",
    "RadioDevice",
    "LazyDevice",
    "LoadedDevice",
    "TrackedDevice",
    "EventSource",
    "DeviceRegistry",
    "RegistrySnapshot",
    "open_registry",
    "Settings",
    "load_settings",
    "Client",
]


class Client:
    """Public client for interacting with rfkillctl core capabilities.

    A `Client` instance wraps settings, sysfs discovery, block/unblock writes
    and the event-sourced registry behind a stable API intended for
    third-party tools (GUI/TUI/services/scripts).
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        writer: EventWriter | None = None,
    ) -> None:
        self._service = RfkillService(settings=settings, writer=writer)

    @property
    def settings(self) -> Settings:
        return self._service.settings

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_devices(self) -> list[LazyDevice]:
        return self._service.list_devices()

    def device(self, index: int) -> LazyDevice:
        return self._service.device(index)

    def load_device(self, index: int) -> LoadedDevice:
        return self._service.load_device(index)

    def block(self, index: int) -> Event:
        return self._service.block(index)

    def unblock(self, index: int) -> Event:
        return self._service.unblock(index)

    def block_kind(self, kind: Kind) -> Event:
        return self._service.set_block_kind(kind, True)

    def unblock_kind(self, kind: Kind) -> Event:
        return self._service.set_block_kind(kind, False)

    async def open_registry(self) -> tuple[DeviceRegistry, asyncio.Queue[Exception]]:
        return await self._service.open_registry()
