from __future__ import annotations

import asyncio

from rfkillctl.core.locks import RWLock


def test_readers_share_the_lock() -> None:
    async def _scenario() -> None:
        lock = RWLock()
        async with lock.read():
            async with lock.read():
                assert lock.readers == 2
        assert lock.readers == 0

    asyncio.run(_scenario())


def test_writer_waits_for_readers_and_excludes_them() -> None:
    async def _scenario() -> list[str]:
        lock = RWLock()
        order: list[str] = []

        async def _writer() -> None:
            async with lock.write():
                order.append("write")
                await asyncio.sleep(0)
                order.append("write-done")

        async def _late_reader() -> None:
            async with lock.read():
                order.append("late-read")

        async with lock.read():
            writer = asyncio.create_task(_writer())
            await asyncio.sleep(0.01)
            assert not lock.write_locked
            late = asyncio.create_task(_late_reader())
            await asyncio.sleep(0.01)
            order.append("read-done")

        await asyncio.gather(writer, late)
        return order

    assert asyncio.run(_scenario()) == ["read-done", "write", "write-done", "late-read"]


def test_cancelled_writer_releases_waiting_readers() -> None:
    async def _scenario() -> bool:
        lock = RWLock()

        async def _writer() -> None:
            async with lock.write():
                pass

        async def _reader() -> bool:
            async with lock.read():
                return True

        async with lock.read():
            writer = asyncio.create_task(_writer())
            await asyncio.sleep(0.01)
            reader = asyncio.create_task(_reader())
            await asyncio.sleep(0.01)
            writer.cancel()
            return await asyncio.wait_for(reader, timeout=1)

    assert asyncio.run(_scenario()) is True
