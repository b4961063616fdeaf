"""Item channels connecting pipeline stages."""

import asyncio
from collections.abc import AsyncIterator
from typing import Any, Generic, TypeVar

from s3_stage.exceptions import ChannelClosed

T = TypeVar("T")


class Channel(Generic[T]):
    """FIFO channel between one producer and its consumers.

    The producer calls :meth:`close` to signal end-of-input. Items already
    queued remain receivable; once the channel is closed and drained,
    :meth:`receive` raises :class:`ChannelClosed`.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: asyncio.Queue[T] = asyncio.Queue(maxsize=maxsize)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    async def send(self, item: T) -> None:
        """Queue an item, suspending while a bounded channel is full.

        Raises:
            ChannelClosed: If the channel was closed before the item fit.
        """
        if self.closed:
            raise ChannelClosed()
        if not self._queue.full():
            self._queue.put_nowait(item)
            return
        finished, _ = await self._race(self._queue.put(item))
        if not finished:
            raise ChannelClosed()

    async def receive(self) -> T:
        """Return the next item, suspending while the channel is empty.

        Raises:
            ChannelClosed: If the channel is closed and has no items left.
        """
        while True:
            if not self._queue.empty():
                return self._queue.get_nowait()
            if self.closed:
                raise ChannelClosed()
            finished, item = await self._race(self._queue.get())
            if finished:
                return item

    async def _race(self, operation) -> tuple[bool, Any]:
        """Await a queue operation, abandoning it if the channel closes first.

        Returns a (finished, result) pair.
        """
        op_task = asyncio.ensure_future(operation)
        close_task = asyncio.ensure_future(self._closed.wait())
        try:
            done, _ = await asyncio.wait(
                {op_task, close_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            op_task.cancel()
            raise
        finally:
            close_task.cancel()
        if op_task in done:
            return True, op_task.result()
        op_task.cancel()
        try:
            await op_task
        except asyncio.CancelledError:
            pass
        else:
            # Completed before the cancellation landed.
            return True, op_task.result()
        return False, None

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        try:
            return await self.receive()
        except ChannelClosed:
            raise StopAsyncIteration from None
