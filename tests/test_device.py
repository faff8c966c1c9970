from __future__ import annotations

from pathlib import Path

import pytest

from rfkillctl.core.device import LazyDevice, LoadedDevice, RadioDevice, TrackedDevice
from rfkillctl.core.errors import (
    DeviceLoadError,
    InvalidBoolValueError,
    InvalidHardBlockReasonsError,
    InvalidKindNameError,
)
from rfkillctl.core.model import HardBlockReasons, Kind
from rfkillctl.core.status import BlockStatus


def _write_device(root: Path, name: str = "rfkill0", **files: str) -> Path:
    attributes = {
        "name": "phy0\n",
        "type": "wifi\n",
        "persistent": "0\n",
        "soft": "0\n",
        "hard": "0\n",
    }
    attributes.update(files)
    path = root / name
    path.mkdir(parents=True, exist_ok=True)
    for filename, content in attributes.items():
        (path / filename).write_text(content, encoding="utf-8")
    return path


def _summary(device: RadioDevice) -> tuple[Kind, bool]:
    return device.kind, device.block_status.blocked


def test_load_reads_all_attributes(tmp_path: Path) -> None:
    device = LazyDevice(_write_device(tmp_path, soft="1\n"))
    loaded = device.load()
    assert loaded == LoadedDevice(
        name="phy0",
        kind=Kind.WLAN,
        persistent=False,
        block_status=BlockStatus.from_soft_and_hard(True, None),
    )


def test_hard_block_reasons_read_only_when_hard_blocked(tmp_path: Path) -> None:
    device = LazyDevice(_write_device(tmp_path, hard_block_reasons="garbage\n"))
    assert device.hard_block_reasons is None
    assert device.block_status == BlockStatus.UNBLOCKED
    assert "hard_block_reasons" not in device.cached()

    with pytest.raises(InvalidHardBlockReasonsError):
        device.hard_block_reasons_unchecked()


def test_hard_blocked_device_reports_reasons(tmp_path: Path) -> None:
    device = LazyDevice(_write_device(tmp_path, hard="1\n", hard_block_reasons="0x1\n"))
    assert device.hard_blocked is True
    assert device.hard_block_reasons == HardBlockReasons.SIGNAL
    assert device.block_status.hard_blocked


def test_invalid_bool_is_distinct_and_does_not_poison_cache(tmp_path: Path) -> None:
    path = _write_device(tmp_path, soft="2\n")
    device = LazyDevice(path)

    with pytest.raises(InvalidBoolValueError) as exc:
        device.soft_blocked
    assert exc.value.value == "2"
    assert "soft_blocked" not in device.cached()

    (path / "soft").write_text("1\n", encoding="utf-8")
    assert device.soft_blocked is True


@pytest.mark.parametrize("content", ["true", " 1", "1\n\n", "01"])
def test_bool_requires_exact_digit(tmp_path: Path, content: str) -> None:
    device = LazyDevice(_write_device(tmp_path, persistent=content))
    with pytest.raises(InvalidBoolValueError):
        device.persistent


def test_values_are_cached_after_first_read(tmp_path: Path) -> None:
    path = _write_device(tmp_path)
    device = LazyDevice(path)
    assert device.name == "phy0"

    (path / "name").write_text("renamed\n", encoding="utf-8")
    assert device.name == "phy0"


def test_unknown_type_label(tmp_path: Path) -> None:
    device = LazyDevice(_write_device(tmp_path, type="laser\n"))
    with pytest.raises(InvalidKindNameError):
        device.kind


def test_failed_load_returns_partially_cached_device(tmp_path: Path) -> None:
    path = _write_device(tmp_path, persistent="yes\n")
    device = LazyDevice(path)

    with pytest.raises(DeviceLoadError) as exc:
        device.load()

    assert exc.value.field == "persistent"
    assert exc.value.device is device
    assert isinstance(exc.value.__cause__, InvalidBoolValueError)
    assert exc.value.device.cached() == {"name": "phy0", "kind": Kind.WLAN}

    (path / "persistent").write_text("1\n", encoding="utf-8")
    (path / "name").write_text("changed\n", encoding="utf-8")
    loaded = device.load()
    assert loaded.persistent is True
    assert loaded.name == "phy0"


def test_missing_attribute_file_propagates_os_error(tmp_path: Path) -> None:
    path = _write_device(tmp_path)
    (path / "type").unlink()
    device = LazyDevice(path)

    with pytest.raises(DeviceLoadError) as exc:
        device.load()
    assert exc.value.field == "kind"
    assert isinstance(exc.value.__cause__, FileNotFoundError)

    with pytest.raises(FileNotFoundError):
        device.kind


def test_index_from_directory_name(tmp_path: Path) -> None:
    assert LazyDevice(tmp_path / "rfkill12").index == 12
    assert LazyDevice(tmp_path / "phy0").index is None


def test_all_shapes_share_kind_and_block_status(tmp_path: Path) -> None:
    lazy = LazyDevice(_write_device(tmp_path, type="bluetooth\n", soft="1\n"))
    loaded = lazy.load()
    tracked = TrackedDevice(
        index=0,
        kind=Kind.BLUETOOTH,
        block_status=BlockStatus.from_soft_and_hard(True, None),
    )
    assert _summary(lazy) == _summary(loaded) == _summary(tracked) == (Kind.BLUETOOTH, True)
