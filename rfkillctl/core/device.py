"""Device representations.

A radio device is seen in one of three shapes depending on how it was
obtained:

* :class:`LazyDevice` reads sysfs attribute files on demand and caches each
  successfully parsed value.
* :class:`LoadedDevice` has every attribute resolved. It is produced by
  :meth:`LazyDevice.load`.
* :class:`TrackedDevice` is built from the event stream by the registry and
  only knows what events carry.

All three satisfy :class:`RadioDevice`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, TypeVar

from rfkillctl.core.errors import DeviceLoadError, InvalidBoolValueError
from rfkillctl.core.lazy import LazyCell
from rfkillctl.core.model import HardBlockReasons, Kind
from rfkillctl.core.status import BlockStatus

T = TypeVar("T")

_DIR_NAME_RE = re.compile(r"^rfkill(\d+)$")
LOGGER = logging.getLogger(__name__)


class RadioDevice(Protocol):
    @property
    def kind(self) -> Kind: ...

    @property
    def block_status(self) -> BlockStatus: ...


@dataclass(frozen=True)
class LoadedDevice:
    name: str
    kind: Kind
    persistent: bool
    block_status: BlockStatus


@dataclass(frozen=True)
class TrackedDevice:
    index: int
    kind: Kind
    block_status: BlockStatus


def _parse_bool(value: str) -> bool:
    if value == "0":
        return False
    if value == "1":
        return True
    raise InvalidBoolValueError(value)


class LazyDevice:
    """An rfkill device backed by its sysfs directory."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._name: LazyCell[str] = LazyCell()
        self._kind: LazyCell[Kind] = LazyCell()
        self._persistent: LazyCell[bool] = LazyCell()
        self._soft: LazyCell[bool] = LazyCell()
        self._hard: LazyCell[bool] = LazyCell()
        self._hard_block_reasons: LazyCell[HardBlockReasons] = LazyCell()

    def __repr__(self) -> str:
        return f"LazyDevice({str(self.path)!r})"

    @property
    def index(self) -> int | None:
        match = _DIR_NAME_RE.match(self.path.name)
        return int(match.group(1)) if match else None

    def _read(self, cell: LazyCell[T], filename: str, parser: Callable[[str], T]) -> T:
        def _load() -> T:
            path = self.path / filename
            text = path.read_text(encoding="utf-8")
            if text.endswith("\n"):
                text = text[:-1]
            value = parser(text)
            LOGGER.debug("Read %s = %r", path, value)
            return value

        return cell.get_or_init(_load)

    @property
    def name(self) -> str:
        return self._read(self._name, "name", str)

    @property
    def kind(self) -> Kind:
        return self._read(self._kind, "type", Kind.from_label)

    @property
    def persistent(self) -> bool:
        return self._read(self._persistent, "persistent", _parse_bool)

    @property
    def soft_blocked(self) -> bool:
        return self._read(self._soft, "soft", _parse_bool)

    @property
    def hard_blocked(self) -> bool:
        return self._read(self._hard, "hard", _parse_bool)

    def hard_block_reasons_unchecked(self) -> HardBlockReasons:
        """Read ``hard_block_reasons`` whether or not the device is hard-blocked."""
        return self._read(self._hard_block_reasons, "hard_block_reasons", HardBlockReasons.parse)

    @property
    def hard_block_reasons(self) -> HardBlockReasons | None:
        if not self.hard_blocked:
            return None
        return self.hard_block_reasons_unchecked()

    @property
    def block_status(self) -> BlockStatus:
        return BlockStatus.from_soft_and_hard(self.soft_blocked, self.hard_block_reasons)

    def cached(self) -> dict[str, object]:
        cells = {
            "name": self._name,
            "kind": self._kind,
            "persistent": self._persistent,
            "soft_blocked": self._soft,
            "hard_blocked": self._hard,
            "hard_block_reasons": self._hard_block_reasons,
        }
        return {field: cell.get() for field, cell in cells.items() if cell.is_set}

    def load(self) -> LoadedDevice:
        """Resolve every attribute and return the fully loaded device.

        Attributes are read in the order name, kind, persistent, block
        status. On the first failure a :class:`DeviceLoadError` is raised
        that carries this device, with whatever was cached so far.
        """
        values: dict[str, object] = {}
        for field in ("name", "kind", "persistent", "block_status"):
            try:
                values[field] = getattr(self, field)
            except (OSError, ValueError) as exc:
                raise DeviceLoadError(field, self) from exc
        return LoadedDevice(**values)  # type: ignore[arg-type]
