"""Execution context for a stage run: cancellation plus a logging sink."""

import asyncio
import logging
from typing import Any

from s3_stage.exceptions import Cancelled, DeadlineExceeded
from s3_stage.logging_config import with_context


class CancellationToken:
    """Cooperative cancellation signal shared by the stages of one run.

    The first call to :meth:`cancel` records the cause; later calls are
    ignored.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._cause: Cancelled | None = None
        self._timer: asyncio.TimerHandle | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def cause(self) -> Cancelled | None:
        return self._cause

    def cancel(self, cause: Cancelled | None = None) -> None:
        if self._event.is_set():
            return
        self._cause = cause or Cancelled()
        self._event.set()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def with_timeout(self, seconds: float) -> "CancellationToken":
        """Cancel with :class:`DeadlineExceeded` after ``seconds``.

        Must be called from inside a running event loop.
        """
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(seconds, self.cancel, DeadlineExceeded())
        return self

    async def wait(self) -> Cancelled:
        """Suspend until cancelled, then return the cause."""
        await self._event.wait()
        return self._cause


class StageContext:
    """What a stage receives besides its channels.

    Cancellation lives on ``token``. Per-item annotations are attached to
    the logger with :meth:`annotate` and never travel through the token.
    """

    def __init__(
        self,
        token: CancellationToken | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self.token = token or CancellationToken()
        self.logger = logger or logging.getLogger("s3_stage")

    def annotate(self, **fields: Any) -> "StageContext":
        """Return a context whose logger carries ``fields`` on every record."""
        logger = self.logger
        if isinstance(logger, logging.LoggerAdapter):
            fields = {**(logger.extra or {}), **fields}
            logger = logger.logger
        return StageContext(token=self.token, logger=with_context(logger, **fields))
