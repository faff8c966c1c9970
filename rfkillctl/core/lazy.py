"""Write-once lazily initialized cells."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

_EMPTY = object()


class LazyCell(Generic[T]):
    """Holds a value computed at most once.

    If the initializer raises, the cell stays empty and the next call tries
    again.
    """

    def __init__(self) -> None:
        self._value: object = _EMPTY
        self._lock = threading.Lock()

    @property
    def is_set(self) -> bool:
        return self._value is not _EMPTY

    def get(self) -> T | None:
        value = self._value
        return None if value is _EMPTY else value  # type: ignore[return-value]

    def get_or_init(self, init: Callable[[], T]) -> T:
        value = self._value
        if value is not _EMPTY:
            return value  # type: ignore[return-value]
        with self._lock:
            if self._value is _EMPTY:
                self._value = init()
            return self._value  # type: ignore[return-value]
