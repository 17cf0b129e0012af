from __future__ import annotations
import asyncio
from collections import deque
from typing import AsyncIterator, Deque, Generic, Optional, TypeVar

from splay_bridge.runtime.errors import ResourceInvariantViolation

T = TypeVar("T")


class BoundedBuffer(Generic[T]):
    """Single-producer / single-consumer queue with a hard capacity.

    ``put`` suspends while the buffer is full, iteration suspends while it is
    empty. The producer ends the stream with ``close()``, optionally handing
    over the exception the consumer should see once buffered items drain.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"buffer capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.high_water = 0
        self._items: Deque[T] = deque()
        self._closed = False
        self._error: Optional[BaseException] = None
        self._cond = asyncio.Condition()

    def __len__(self) -> int:
        return len(self._items)

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_bound(self) -> None:
        if len(self._items) > self.capacity:
            raise ResourceInvariantViolation(f"buffer holds {len(self._items)} items, capacity is {self.capacity}")

    async def wait_for_space(self) -> None:
        """Suspend until one more item fits (or the buffer is closed)."""
        async with self._cond:
            while len(self._items) >= self.capacity and not self._closed:
                await self._cond.wait()

    async def put(self, item: T) -> None:
        async with self._cond:
            while len(self._items) >= self.capacity and not self._closed:
                await self._cond.wait()
            if self._closed:
                raise RuntimeError("put() on a closed buffer")
            self._items.append(item)
            self._check_bound()
            self.high_water = max(self.high_water, len(self._items))
            self._cond.notify_all()

    async def close(self, error: Optional[BaseException] = None) -> None:
        async with self._cond:
            self._closed = True
            self._error = error
            self._cond.notify_all()

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        async with self._cond:
            while not self._items and not self._closed:
                await self._cond.wait()
            if self._items:
                item = self._items.popleft()
                self._cond.notify_all()
                return item
            if self._error is not None:
                raise self._error
            raise StopAsyncIteration
