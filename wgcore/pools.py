"""Object pool that can cap how many items are handed out at once."""

from __future__ import annotations

import threading
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")


class WaitPool(Generic[T]):
    """Reuses items made by ``factory``.

    With a nonzero ``max_count``, :meth:`get` blocks while that many items
    are out; zero means no limit.
    """

    def __init__(self, max_count: int, factory: Callable[[], T]) -> None:
        if max_count < 0:
            raise ValueError("max_count must not be negative")
        self._max = max_count
        self._factory = factory
        self._free: List[T] = []
        self._count = 0
        self._cond = threading.Condition()

    @property
    def max_count(self) -> int:
        return self._max

    def get(self) -> T:
        """Take an item, waiting for one to be returned if the cap is reached."""
        with self._cond:
            if self._max:
                while self._count >= self._max:
                    self._cond.wait()
                self._count += 1
            if self._free:
                return self._free.pop()
        return self._factory()

    def put(self, item: T) -> None:
        """Return an item to the pool."""
        with self._cond:
            self._free.append(item)
            if not self._max:
                return
            self._count -= 1
            self._cond.notify()

    def in_use(self) -> int:
        """How many items are currently out (always 0 for an uncapped pool)."""
        with self._cond:
            return self._count