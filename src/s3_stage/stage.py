"""Streaming upload stage: put every inbound file into S3 and forward it."""

import asyncio
from collections.abc import Callable

from s3_stage.config import StageConfig, check_config
from s3_stage.content_type import detect_content_type
from s3_stage.context import StageContext
from s3_stage.exceptions import ChannelClosed, ItemReadError
from s3_stage.models import FileItem
from s3_stage.store import ObjectStore
from s3_stage.streams import Channel


class PutStage:
    """Pipeline stage that uploads files to S3.

    Each run validates the configuration, builds one store, and then
    handles inbound items one at a time, in order:

    - directories are skipped;
    - file content is read fully into memory;
    - the object is uploaded under the item's name;
    - an item wrapping the buffered content is sent downstream.

    Any read or upload failure ends the run with that error. Cancellation is
    checked before each item and while waiting for one; an upload already
    in progress is not interrupted.
    """

    def __init__(
        self,
        config: StageConfig,
        store_factory: Callable[[StageConfig], ObjectStore] = ObjectStore.from_config,
    ) -> None:
        self.config = config
        self._store_factory = store_factory

    async def __call__(
        self,
        ctx: StageContext,
        inbound: Channel[FileItem],
        outbound: Channel[FileItem],
    ) -> None:
        """Run until the inbound channel closes or the context is cancelled.

        Raises:
            ConfigurationError: If required configuration is missing.
            ItemReadError: If an item's content cannot be read.
            UploadError: If S3 rejects an upload.
            Cancelled: If the context is cancelled before or between items.
        """
        check_config(self.config)
        store = self._store_factory(self.config)

        while True:
            if ctx.token.cancelled:
                raise ctx.token.cause
            item = await _next_item(ctx, inbound)
            if item is None:
                return
            if item.is_dir:
                continue

            try:
                with item:
                    content = item.read()
            except OSError as e:
                raise ItemReadError(item.name, e) from e

            content_type = detect_content_type(item.name, content)
            item_ctx = ctx.annotate(content_type=content_type)
            item_ctx.logger.info("Uploading %s", item.name)

            await asyncio.to_thread(
                store.put, item.name, content, content_type, self.config.acl
            )

            # TODO: race this send against ctx.token so a stalled consumer
            # cannot hold the stage past cancellation.
            await outbound.send(FileItem.from_bytes(content, item.info))


def put(
    config: StageConfig,
    store_factory: Callable[[StageConfig], ObjectStore] = ObjectStore.from_config,
) -> PutStage:
    """Build an upload stage for the given configuration."""
    return PutStage(config, store_factory=store_factory)


async def _next_item(ctx: StageContext, inbound: Channel[FileItem]) -> FileItem | None:
    """Wait for the next item or cancellation, whichever comes first.

    Returns None once the inbound channel is closed and drained.

    Raises:
        Cancelled: The token's cause, if cancellation wins.
    """
    receive = asyncio.ensure_future(inbound.receive())
    cancelled = asyncio.ensure_future(ctx.token.wait())
    try:
        done, _ = await asyncio.wait(
            {receive, cancelled}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (receive, cancelled):
            if not task.done():
                task.cancel()

    if receive in done:
        try:
            return receive.result()
        except ChannelClosed:
            return None
    raise ctx.token.cause
