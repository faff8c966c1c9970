from __future__ import annotations

import asyncio
import errno
import os
from pathlib import Path

import pytest

from rfkillctl.core.errors import EventWriteError, InvalidDiscriminantError, RecordLengthError
from rfkillctl.core.model import Block, Event, HardBlockReasons, Kind, Operation
from rfkillctl.transports.chardev import CharDeviceReader, EventSource, write_event


class FakeReader:
    def __init__(self, chunks: list[bytes | OSError]) -> None:
        self.chunks = list(chunks)
        self.sizes: list[int] = []
        self.closed = False

    async def read(self, size: int) -> bytes:
        self.sizes.append(size)
        if not self.chunks:
            return b""
        chunk = self.chunks.pop(0)
        if isinstance(chunk, OSError):
            raise chunk
        return chunk

    def close(self) -> None:
        self.closed = True


def _event(index: int, operation: Operation = Operation.ADD, **block: object) -> Event:
    return Event(index=index, kind=Kind.WLAN, operation=operation, block=Block(**{"soft": False, **block}))  # type: ignore[arg-type]


async def _collect(source: EventSource) -> list[object]:
    return [item async for item in source]


def test_source_yields_events_and_errors_in_order() -> None:
    first = _event(0)
    second = _event(1, Operation.CHANGE, soft=False, hard_block_reasons=HardBlockReasons.SIGNAL)
    bad_kind = bytearray(first.encode())
    bad_kind[4] = 9
    reader = FakeReader([first.encode(), b"\x00" * 5, OSError("EIO"), bytes(bad_kind), second.encode()])

    items = asyncio.run(_collect(EventSource(reader)))

    assert items[0] == first
    assert isinstance(items[1], RecordLengthError)
    assert isinstance(items[2], OSError)
    assert isinstance(items[3], InvalidDiscriminantError)
    assert items[4] == second
    assert len(items) == 5
    assert set(reader.sizes) == {9}


def test_source_is_not_restartable() -> None:
    reader = FakeReader([_event(0).encode()])
    source = EventSource(reader)

    assert len(asyncio.run(_collect(source))) == 1
    assert source.finished
    reader.chunks.append(_event(1).encode())
    assert asyncio.run(_collect(source)) == []


def test_close_closes_reader() -> None:
    reader = FakeReader([])
    source = EventSource(reader)
    source.close()
    assert reader.closed
    assert source.finished


def test_char_device_reader_waits_for_data_and_reports_eof() -> None:
    read_fd, write_fd = os.pipe()
    os.set_blocking(read_fd, False)
    reader = CharDeviceReader(read_fd)
    event = _event(2, soft=True)

    async def _scenario() -> list[object]:
        source = EventSource(reader)
        pending = asyncio.ensure_future(source.__anext__())
        await asyncio.sleep(0.01)
        assert not pending.done()
        os.write(write_fd, event.encode())
        first = await asyncio.wait_for(pending, timeout=1)
        os.close(write_fd)
        rest = await asyncio.wait_for(_collect(source), timeout=1)
        return [first, *rest]

    try:
        assert asyncio.run(_scenario()) == [event]
    finally:
        reader.close()
    assert reader.closed


def test_char_device_reader_open_missing_path(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        CharDeviceReader.open(str(tmp_path / "rfkill"))


def test_write_event_writes_encoded_record(tmp_path: Path) -> None:
    target = tmp_path / "rfkill"
    target.write_bytes(b"")
    event = _event(3, Operation.CHANGE, soft=True)

    write_event(event, str(target))

    assert target.read_bytes() == event.encode()
    assert len(target.read_bytes()) == 8


def test_write_event_failure_is_wrapped(tmp_path: Path) -> None:
    with pytest.raises(EventWriteError) as exc:
        write_event(_event(3), str(tmp_path / "missing" / "rfkill"))
    assert isinstance(exc.value.__cause__, OSError)


def test_vanished_device_is_reported_once_then_ends() -> None:
    reader = FakeReader([OSError(errno.ENODEV, "No such device"), _event(0).encode()])
    source = EventSource(reader)

    items = asyncio.run(_collect(source))

    assert len(items) == 1
    assert isinstance(items[0], OSError)
    assert items[0].errno == errno.ENODEV
    assert source.finished
    assert len(reader.sizes) == 1
