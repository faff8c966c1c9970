"""Domain-specific errors for rfkillctl."""

from __future__ import annotations

from typing import Any


class RfkillctlError(Exception):
    """Base error for rfkillctl."""


class RecordDecodeError(RfkillctlError, ValueError):
    """Raised when an event record or attribute file cannot be decoded."""

    field = "record"


class RecordLengthError(RecordDecodeError):
    """Raised when an event record is neither 8 nor 9 bytes long."""

    def __init__(self, length: int) -> None:
        super().__init__(f"read {length} bytes but expected to read 8 or 9 bytes")
        self.length = length


class InvalidDiscriminantError(RecordDecodeError):
    """Raised when a kind or operation byte is out of range."""

    def __init__(self, field: str, value: int) -> None:
        super().__init__(f"invalid discriminant {value} for {field}")
        self.field = field
        self.value = value


class InvalidBoolValueError(RecordDecodeError):
    """Raised when a boolean attribute file holds something other than 0 or 1."""

    field = "bool"

    def __init__(self, value: str) -> None:
        super().__init__(f"invalid numeric value for bool (expected 0 or 1, found {value!r})")
        self.value = value


class InvalidKindNameError(RecordDecodeError):
    """Raised when a type attribute file names no known kind."""

    field = "type"

    def __init__(self, value: str) -> None:
        super().__init__(f"unknown rfkill type {value!r}")
        self.value = value


class InvalidHardBlockReasonsError(RecordDecodeError):
    """Raised when hard_block_reasons is not an 8-bit hexadecimal value."""

    field = "hard_block_reasons"

    def __init__(self, value: str) -> None:
        super().__init__(f"invalid hard block reasons {value!r} (expected 8-bit hex)")
        self.value = value


class DeviceLoadError(RfkillctlError):
    """Raised when a lazily read device cannot be fully loaded.

    The partially read device is kept on ``device`` so callers can inspect
    what was cached and retry the failing field.
    """

    def __init__(self, field: str, device: Any) -> None:
        super().__init__(f"could not load '{field}' for {device.path}")
        self.field = field
        self.device = device


class UnknownDeviceError(RfkillctlError):
    """Raised (or reported) when an event targets an index the registry does not hold."""

    def __init__(self, index: int, operation: Any) -> None:
        super().__init__(f"{operation} event for unknown device index {index}")
        self.index = index
        self.operation = operation


class RegistryClosedError(RfkillctlError):
    """Raised when reading from a registry after it was closed."""


class ConfigLoadError(RfkillctlError):
    """Raised when a settings file cannot be read."""


class ConfigValidationError(RfkillctlError):
    """Raised when a settings file does not conform to schema."""


class DeviceDiscoveryError(RfkillctlError):
    """Raised when the rfkill sysfs class directory cannot be listed."""


class DeviceSelectionError(RfkillctlError):
    """Raised when no device matches the requested index."""


class EventWriteError(RfkillctlError):
    """Raised when writing a change event to the character device fails."""
