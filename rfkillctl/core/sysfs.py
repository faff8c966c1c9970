"""Discovery of rfkill devices through sysfs."""

from __future__ import annotations

import re
from pathlib import Path

from rfkillctl.core.device import LazyDevice
from rfkillctl.core.errors import DeviceDiscoveryError

_DEVICE_DIR_RE = re.compile(r"^rfkill(\d+)$")


def discover_devices(sysfs_root: str | Path) -> list[LazyDevice]:
    """Return one lazily read device per ``rfkill<N>`` entry, ordered by N."""
    root = Path(sysfs_root)
    try:
        entries = list(root.iterdir())
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise DeviceDiscoveryError(f"Could not list rfkill devices in {root}: {exc}") from exc

    found: list[tuple[int, Path]] = []
    for entry in entries:
        match = _DEVICE_DIR_RE.match(entry.name)
        if match and entry.is_dir():
            found.append((int(match.group(1)), entry))
    return [LazyDevice(path) for _, path in sorted(found)]
