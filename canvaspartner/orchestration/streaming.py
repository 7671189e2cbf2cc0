"""Relaying a turn to the client.

StreamAccumulator keeps the authoritative copy of everything sent as
assistant text; the final assistant message is persisted from it so the
stored text is exactly what the client saw.

TurnRelay decouples the turn from the HTTP response. The turn runs in its
own task and hands events over through a queue. When the client goes away
the relay stops delivering and signals cancellation, but the task keeps
running until the current round's tools and writes have finished.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

from canvaspartner.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Strong references to detached turn tasks until they finish
_background_tasks: set[asyncio.Task[None]] = set()


class StreamAccumulator:
    """Append-only buffer of streamed text."""

    def __init__(self) -> None:
        self._chunks: list[str] = []

    def append(self, chunk: str) -> None:
        self._chunks.append(chunk)

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    def __bool__(self) -> bool:
        return any(self._chunks)

    def __len__(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)


class _Done:
    pass


_DONE = _Done()


class TurnRelay(Generic[T]):
    """Runs a producer in a background task and relays its events.

    Usage:
        relay = TurnRelay(lambda cancel: orchestrator.stream_turn(turn, cancel))
        async for event in relay.events():
            ...
    """

    def __init__(self, producer: Callable[[asyncio.Event], AsyncIterator[T]]) -> None:
        self._producer = producer
        self._queue: asyncio.Queue[T | _Done | BaseException] = asyncio.Queue()
        self.cancel = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._pump())
        _background_tasks.add(self._task)
        self._task.add_done_callback(_background_tasks.discard)

    async def _pump(self) -> None:
        try:
            async for event in self._producer(self.cancel):
                self._queue.put_nowait(event)
        except Exception as e:  # noqa: BLE001
            logger.exception("turn_producer_failed", error=str(e))
            self._queue.put_nowait(e)
        finally:
            self._queue.put_nowait(_DONE)

    async def events(self) -> AsyncIterator[T]:
        """Yield producer events until it finishes.

        Closing this iterator early (client disconnect) sets `cancel` and
        leaves the producer running.
        """
        self.start()
        delivered_all = False
        try:
            while True:
                item = await self._queue.get()
                if isinstance(item, _Done):
                    delivered_all = True
                    return
                if isinstance(item, BaseException):
                    delivered_all = True
                    raise item
                yield item
        finally:
            if not delivered_all:
                logger.info("turn_consumer_disconnected")
                self.cancel.set()

    async def wait(self) -> None:
        """Wait for the producer task to finish."""
        if self._task is not None:
            await asyncio.shield(self._task)
