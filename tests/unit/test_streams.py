"""Unit tests for channels and cancellation tokens."""

import asyncio

import pytest

from s3_stage.context import CancellationToken, StageContext
from s3_stage.exceptions import Cancelled, ChannelClosed, DeadlineExceeded
from s3_stage.streams import Channel


class TestChannel:
    """Tests for Channel send/receive/close semantics."""

    def test_items_arrive_in_send_order(self):
        async def scenario():
            channel = Channel()
            for i in range(3):
                await channel.send(i)
            channel.close()
            return [item async for item in channel]

        assert asyncio.run(scenario()) == [0, 1, 2]

    def test_closed_channel_drains_before_raising(self):
        async def scenario():
            channel = Channel()
            await channel.send("last")
            channel.close()
            first = await channel.receive()
            with pytest.raises(ChannelClosed):
                await channel.receive()
            return first

        assert asyncio.run(scenario()) == "last"

    def test_close_wakes_waiting_receiver(self):
        """A receiver blocked on an empty channel sees ChannelClosed."""

        async def scenario():
            channel = Channel()
            receiver = asyncio.create_task(channel.receive())
            await asyncio.sleep(0)
            channel.close()
            with pytest.raises(ChannelClosed):
                await receiver

        asyncio.run(scenario())

    def test_send_after_close_raises(self):
        async def scenario():
            channel = Channel()
            channel.close()
            with pytest.raises(ChannelClosed):
                await channel.send("late")

        asyncio.run(scenario())

    def test_bounded_send_waits_for_receiver(self):
        """A full bounded channel suspends the sender until space frees up."""

        async def scenario():
            channel = Channel(maxsize=1)
            await channel.send("a")
            sender = asyncio.create_task(channel.send("b"))
            await asyncio.sleep(0)
            assert not sender.done()
            assert await channel.receive() == "a"
            await sender
            return await channel.receive()

        assert asyncio.run(scenario()) == "b"

    def test_close_releases_blocked_sender(self):
        async def scenario():
            channel = Channel(maxsize=1)
            await channel.send("a")
            sender = asyncio.create_task(channel.send("b"))
            await asyncio.sleep(0)
            channel.close()
            with pytest.raises(ChannelClosed):
                await sender
            return [item async for item in channel]

        assert asyncio.run(scenario()) == ["a"]

    def test_close_is_idempotent(self):
        async def scenario():
            channel = Channel()
            channel.close()
            channel.close()
            return channel.closed

        assert asyncio.run(scenario()) is True


class TestCancellationToken:
    """Tests for cooperative cancellation."""

    def test_default_cause_is_cancelled(self):
        async def scenario():
            token = CancellationToken()
            token.cancel()
            return await token.wait()

        cause = asyncio.run(scenario())

        assert type(cause) is Cancelled
        assert str(cause) == "context canceled"

    def test_first_cause_wins(self):
        async def scenario():
            token = CancellationToken()
            token.cancel(DeadlineExceeded())
            token.cancel(Cancelled("later"))
            return token.cause

        assert isinstance(asyncio.run(scenario()), DeadlineExceeded)

    def test_timeout_cancels_with_deadline_exceeded(self):
        async def scenario():
            token = CancellationToken().with_timeout(0.01)
            return await asyncio.wait_for(token.wait(), timeout=1)

        assert isinstance(asyncio.run(scenario()), DeadlineExceeded)

    def test_uncancelled_token(self):
        token = CancellationToken()

        assert token.cancelled is False
        assert token.cause is None


class TestStageContext:
    """Tests for context annotations."""

    def test_annotate_keeps_token_and_merges_fields(self):
        ctx = StageContext()

        annotated = ctx.annotate(content_type="text/plain").annotate(attempt=1)

        assert annotated.token is ctx.token
        assert annotated.logger.extra == {"content_type": "text/plain", "attempt": 1}

    def test_annotate_does_not_change_original(self):
        ctx = StageContext()

        ctx.annotate(content_type="image/png")

        assert not hasattr(ctx.logger, "extra")
