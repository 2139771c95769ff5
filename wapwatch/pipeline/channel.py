import asyncio
from typing import AsyncIterator, Generic, TypeVar

from wapwatch.exceptions import ChannelClosed

T = TypeVar("T")

_CLOSED = object()


class Channel(Generic[T]):
    """
    Ограниченная очередь с закрытием для нескольких читателей.

    send() блокируется, пока в канале нет места (это и есть backpressure).
    recv() после close() отдаёт оставшиеся элементы, затем бросает ChannelClosed
    всем читателям. Ожидание в send()/recv() прерывается отменой задачи.
    """

    def __init__(self, maxsize: int):
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")
        self.maxsize = maxsize
        self._queue: asyncio.Queue = asyncio.Queue()
        self._slots = asyncio.Semaphore(maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize() - (1 if self._closed else 0)

    async def send(self, item: T) -> None:
        if self._closed:
            raise ChannelClosed("send on closed channel")
        await self._slots.acquire()
        if self._closed:
            self._slots.release()
            raise ChannelClosed("send on closed channel")
        self._queue.put_nowait(item)

    def full(self) -> bool:
        return self._slots.locked()

    async def recv(self) -> T:
        item = await self._queue.get()
        return self._take(item)

    def recv_nowait(self) -> T:
        """asyncio.QueueEmpty, если пусто; ChannelClosed, если закрыт и пуст."""
        return self._take(self._queue.get_nowait())

    def _take(self, item):
        if item is _CLOSED:
            # Маркер возвращается обратно для остальных читателей
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed("channel closed")
        self._slots.release()
        return item

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[T]:
        while True:
            try:
                yield await self.recv()
            except ChannelClosed:
                return
