"""Orchestrator for the local-files-to-S3 pipeline."""

import asyncio
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from s3_stage.config import StageConfig
from s3_stage.context import CancellationToken, StageContext
from s3_stage.models import FileItem
from s3_stage.pipeline import run_stages, source
from s3_stage.stage import put
from s3_stage.store import ObjectStore


def collect_items(paths: Iterable[str | Path]) -> Iterator[FileItem]:
    """Yield items for the given files and everything beneath given directories.

    Directories are yielded too; the put stage skips them. Files found under
    a directory are named by their path relative to that directory.
    """
    for raw_path in paths:
        base_path = Path(raw_path).expanduser()
        yield FileItem.from_path(base_path)
        if not base_path.is_dir():
            continue
        for path in sorted(base_path.rglob("*")):
            yield FileItem.from_path(path, name=path.relative_to(base_path).as_posix())


def run(
    paths: Iterable[str | Path],
    config: StageConfig,
    store: ObjectStore | Any | None = None,
    timeout: float | None = None,
) -> dict[str, int]:
    """Upload the given paths to S3 through the put stage.

    Args:
        paths: Files or directories to upload.
        config: Stage configuration.
        store: ObjectStore instance (or mock for testing); built from config
            when omitted.
        timeout: Seconds before the run is cancelled.

    Returns:
        Dictionary with 'files_found' and 'files_uploaded' counts.

    Raises:
        ConfigurationError: If required configuration is missing.
        ItemReadError: If a file cannot be read.
        UploadError: If S3 rejects an upload.
        DeadlineExceeded: If the timeout passes first.
    """
    items = list(collect_items(paths))
    files_found = sum(1 for item in items if not item.is_dir)

    if store is None:
        stage = put(config)
    else:
        stage = put(config, store_factory=lambda _config: store)

    async def _run() -> list[FileItem]:
        token = CancellationToken()
        if timeout is not None:
            token.with_timeout(timeout)
        ctx = StageContext(token=token)
        return await run_stages(ctx, source(items), stage)

    uploaded = asyncio.run(_run())

    return {
        "files_found": files_found,
        "files_uploaded": len(uploaded),
    }
