"""Tests for StreamAccumulator and TurnRelay."""

import asyncio
from collections.abc import AsyncIterator

import pytest

from canvaspartner.orchestration.streaming import StreamAccumulator, TurnRelay


class TestStreamAccumulator:
    def test_concatenates_in_order(self) -> None:
        buffer = StreamAccumulator()
        for chunk in ["Hel", "lo", " world"]:
            buffer.append(chunk)

        assert buffer.text == "Hello world"
        assert len(buffer) == 11
        assert buffer

    def test_empty_chunks_are_falsy(self) -> None:
        buffer = StreamAccumulator()
        buffer.append("")
        assert not buffer


class TestTurnRelay:
    @pytest.mark.asyncio
    async def test_relays_every_event(self) -> None:
        async def producer(cancel: asyncio.Event) -> AsyncIterator[int]:
            for i in range(3):
                yield i

        relay: TurnRelay[int] = TurnRelay(producer)
        assert [event async for event in relay.events()] == [0, 1, 2]
        assert not relay.cancel.is_set()

    @pytest.mark.asyncio
    async def test_producer_exception_reaches_consumer(self) -> None:
        async def producer(cancel: asyncio.Event) -> AsyncIterator[int]:
            yield 1
            raise RuntimeError("broken")

        relay: TurnRelay[int] = TurnRelay(producer)
        received = []
        with pytest.raises(RuntimeError, match="broken"):
            async for event in relay.events():
                received.append(event)
        assert received == [1]

    @pytest.mark.asyncio
    async def test_disconnect_sets_cancel_and_producer_finishes(self) -> None:
        finished = asyncio.Event()
        observed_cancel = []

        async def producer(cancel: asyncio.Event) -> AsyncIterator[str]:
            yield "first"
            await asyncio.sleep(0.05)
            observed_cancel.append(cancel.is_set())
            # work after the disconnect still completes
            finished.set()
            yield "late"

        relay: TurnRelay[str] = TurnRelay(producer)
        events = relay.events()
        assert await events.__anext__() == "first"
        await events.aclose()

        assert relay.cancel.is_set()
        await relay.wait()
        assert finished.is_set()
        assert observed_cancel == [True]
