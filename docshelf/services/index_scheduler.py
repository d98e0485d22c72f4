"""Background rebuilds of the search index.

Waits ``index_initial_delay`` seconds after start, rebuilds once when
``index_on_startup`` is set, then rebuilds every ``index_interval``
seconds. A failed rebuild is logged and the loop carries on.
"""

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from ..config import Settings
from ..models import IndexBuildReport

if TYPE_CHECKING:
    from ..engine.search import SearchIndex

logger = logging.getLogger(__name__)


class IndexScheduler:
    """Periodic index rebuilder."""

    def __init__(self, index: "SearchIndex", settings: Settings):
        self._index = index
        self.enabled = settings.index_enabled
        self.on_startup = settings.index_on_startup
        self.initial_delay = settings.index_initial_delay
        self.interval = settings.index_interval
        self._task: asyncio.Task | None = None
        self.last_index_time: datetime | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop. No-op when disabled or already running."""
        if not self.enabled:
            logger.info("Search index scheduling disabled")
            return
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Index scheduler started (initial delay {self.initial_delay}s, "
            f"interval {self.interval}s)"
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Index scheduler stopped")

    async def trigger(self) -> IndexBuildReport:
        """Rebuild now. Joins a rebuild already in progress."""
        report = await self._index.rebuild()
        self.last_index_time = report.built_at
        return report

    async def _run(self) -> None:
        await asyncio.sleep(self.initial_delay)
        if self.on_startup:
            await self._safe_rebuild()
        while True:
            await asyncio.sleep(self.interval)
            await self._safe_rebuild()

    async def _safe_rebuild(self) -> None:
        try:
            await self.trigger()
        except Exception as e:
            logger.error(f"Scheduled index rebuild failed: {e}", exc_info=True)
