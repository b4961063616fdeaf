"""Run stages concurrently, connected by channels."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable

from s3_stage.context import StageContext
from s3_stage.exceptions import Cancelled
from s3_stage.models import FileItem
from s3_stage.streams import Channel

logger = logging.getLogger(__name__)

Stage = Callable[[StageContext, Channel[FileItem], Channel[FileItem]], Awaitable[None]]
Source = Callable[[StageContext, Channel[FileItem]], Awaitable[None]]


def source(items: Iterable[FileItem]) -> Source:
    """Build a producer that sends ``items`` in order."""

    async def produce(ctx: StageContext, outbound: Channel[FileItem]) -> None:
        for item in items:
            if ctx.token.cancelled:
                raise ctx.token.cause
            await outbound.send(item)

    return produce


async def run_stages(
    ctx: StageContext,
    producer: Source,
    *stages: Stage,
    buffer: int = 0,
) -> list[FileItem]:
    """Run ``producer`` and ``stages`` as one pipeline.

    Every node runs as its own task. A node's outbound channel is closed when
    it returns, which ends the loop of the next node. The items reaching the
    end of the pipeline are collected and returned.

    Args:
        ctx: Context shared by every node.
        producer: First node; has no inbound channel.
        stages: Remaining nodes in order.
        buffer: Channel capacity; 0 means unbounded.

    Raises:
        The first error raised by any node. That error also cancels the
        context so the remaining nodes stop.
    """
    channels = [Channel(maxsize=buffer) for _ in range(len(stages) + 1)]
    errors: list[BaseException] = []

    async def run_node(name: str, call: Awaitable[None], inbound, outbound) -> None:
        try:
            await call
        except Exception as e:
            if not errors:
                logger.error("Stage %s failed: %s", name, e)
                ctx.token.cancel(Cancelled(f"pipeline stopped: {name} failed"))
            errors.append(e)
            if inbound is not None:
                inbound.close()
        finally:
            outbound.close()

    tasks = [
        asyncio.create_task(
            run_node("source", producer(ctx, channels[0]), None, channels[0])
        )
    ]
    for index, stage in enumerate(stages):
        inbound, outbound = channels[index], channels[index + 1]
        name = getattr(stage, "__name__", type(stage).__name__)
        tasks.append(
            asyncio.create_task(
                run_node(name, stage(ctx, inbound, outbound), inbound, outbound)
            )
        )

    collected = [item async for item in channels[-1]]
    await asyncio.gather(*tasks)

    if errors:
        raise errors[0]
    return collected
