"""Helpers for driving stages in tests."""

import asyncio

from s3_stage.config import StageConfig
from s3_stage.context import CancellationToken, StageContext
from s3_stage.models import ACL, FileInfo, FileItem, Region
from s3_stage.streams import Channel


def make_config(**overrides) -> StageConfig:
    """Build a fully populated config, overriding selected fields."""
    values = {
        "access_key": "test-access-key",
        "secret_key": "test-secret-key",
        "region": Region.US_EAST,
        "bucket": "test-bucket",
        "acl": ACL.PUBLIC_READ,
    }
    values.update(overrides)
    return StageConfig(**values)


def file_item(name: str, content: bytes = b"") -> FileItem:
    return FileItem.from_bytes(content, FileInfo(name=name, size=len(content)))


def dir_item(name: str) -> FileItem:
    return FileItem.from_bytes(b"", FileInfo(name=name, is_dir=True))


def run_stage(
    stage, items, close_inbound=True, cancel_first=False, timeout=None, token=None
):
    """Drive a stage to completion on a fresh event loop.

    Returns (outbound items, raised exception or None).
    """

    async def _drive():
        active = token or CancellationToken()
        if cancel_first:
            active.cancel()
        if timeout is not None:
            active.with_timeout(timeout)
        ctx = StageContext(token=active)

        inbound, outbound = Channel(), Channel()
        for item in items:
            await inbound.send(item)
        if close_inbound:
            inbound.close()

        error = None
        try:
            await stage(ctx, inbound, outbound)
        except Exception as e:
            error = e
        outbound.close()
        return [item async for item in outbound], error

    return asyncio.run(_drive())


