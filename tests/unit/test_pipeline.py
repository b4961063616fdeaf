"""Unit tests for running stages as a pipeline."""

import asyncio
from unittest.mock import MagicMock

import pytest

from s3_stage.context import StageContext
from s3_stage.exceptions import UploadError
from s3_stage.models import FileItem
from s3_stage.pipeline import run_stages, source
from s3_stage.stage import put
from tests.helpers import dir_item, file_item, make_config


async def upper_stage(ctx, inbound, outbound):
    """Stage that upper-cases file content."""
    async for item in inbound:
        await outbound.send(FileItem.from_bytes(item.read().upper(), item.info))


def run_pipeline(items, *stages, buffer=0):
    async def _run():
        return await run_stages(StageContext(), source(items), *stages, buffer=buffer)

    return asyncio.run(_run())


class TestRunStages:
    """Tests for run_stages wiring."""

    def test_source_alone_passes_items_through(self):
        items = [file_item("a.txt", b"a"), file_item("b.txt", b"b")]

        result = run_pipeline(items)

        assert [item.name for item in result] == ["a.txt", "b.txt"]

    def test_put_stage_feeds_next_stage(self, mock_store: MagicMock):
        """Uploaded items are forwarded to downstream stages."""
        stage = put(make_config(), store_factory=lambda _config: mock_store)
        items = [file_item("a.txt", b"abc"), dir_item("d"), file_item("b.txt", b"xyz")]

        result = run_pipeline(items, stage, upper_stage)

        assert [item.read() for item in result] == [b"ABC", b"XYZ"]
        assert mock_store.put.call_count == 2

    def test_bounded_channels_preserve_order(self, mock_store: MagicMock):
        stage = put(make_config(), store_factory=lambda _config: mock_store)
        items = [file_item(f"{i}.txt", str(i).encode()) for i in range(10)]

        result = run_pipeline(items, stage, buffer=1)

        assert [item.name for item in result] == [f"{i}.txt" for i in range(10)]

    def test_stage_error_is_raised(self, mock_store: MagicMock):
        """The failing stage's error ends the pipeline."""
        mock_store.put.side_effect = UploadError("denied", key="a.txt")
        stage = put(make_config(), store_factory=lambda _config: mock_store)

        with pytest.raises(UploadError):
            run_pipeline([file_item("a.txt"), file_item("b.txt")], stage, upper_stage)

    def test_stage_error_cancels_context(self, mock_store: MagicMock):
        mock_store.put.side_effect = UploadError("denied", key="a.txt")
        stage = put(make_config(), store_factory=lambda _config: mock_store)

        async def _run():
            ctx = StageContext()
            with pytest.raises(UploadError):
                await run_stages(ctx, source([file_item("a.txt")]), stage)
            return ctx.token.cancelled

        assert asyncio.run(_run()) is True
