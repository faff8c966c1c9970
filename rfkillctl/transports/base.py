"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol


class EventReader(Protocol):
    async def read(self, size: int) -> bytes:
        """Read at most ``size`` bytes, waiting until data is available.

        An empty result means the stream has ended.
        """

    def close(self) -> None:
        """Release the underlying file descriptor."""
