"""Single-producer event channel between an episode task and its consumer."""

import asyncio
from collections import deque
from typing import Generic, TypeVar

T = TypeVar("T")


class ChannelClosedError(Exception):
    """Raised when sending on a closed channel."""


class EventChannel(Generic[T]):
    """Ordered, lossless channel.

    Unbounded when ``capacity`` is None. With a capacity, ``send`` waits
    while the buffer is full; items are never dropped. Iterating the
    channel yields buffered items in order and stops once the channel is
    closed and drained.
    """

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._buffer: deque[T] = deque()
        self._closed = False
        self._condition = asyncio.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._buffer)

    def _has_space(self) -> bool:
        return self._closed or self._capacity is None or len(self._buffer) < self._capacity

    async def send(self, item: T) -> None:
        """Append an item, waiting for space if the channel is bounded.

        Raises:
            ChannelClosedError: If the channel is closed
        """
        async with self._condition:
            await self._condition.wait_for(self._has_space)
            if self._closed:
                raise ChannelClosedError("Channel is closed")
            self._buffer.append(item)
            self._condition.notify_all()

    async def close(self) -> None:
        """Mark the end of the stream. Buffered items are still delivered."""
        async with self._condition:
            self._closed = True
            self._condition.notify_all()

    def __aiter__(self) -> "EventChannel[T]":
        return self

    async def __anext__(self) -> T:
        async with self._condition:
            await self._condition.wait_for(lambda: bool(self._buffer) or self._closed)
            if not self._buffer:
                raise StopAsyncIteration
            item = self._buffer.popleft()
            self._condition.notify_all()
            return item
