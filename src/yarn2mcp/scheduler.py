"""Catch-up and daily scheduling of mapping publishes.

On start the scheduler publishes whatever is missing, in order:

1. stable: the latest MCP version, yarn-over-mcp, stable channel;
2. snapshot: the latest Yarn version, today's snapshot;
3. mixed: today's mixed snapshot for that Yarn version.

It then sleeps until the next daily boundary (UTC midnight by default) and,
once per day, republishes the snapshot and mixed artifacts for the freshly
looked-up latest Yarn version. Every phase and every tick has its own failure
boundary: errors are logged and the scheduler carries on. Ticks run strictly
one after another.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from .pipeline import MappingPipeline
from .publisher import Clock, utc_now

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PublishScheduler:
    def __init__(
        self,
        pipeline: MappingPipeline,
        *,
        mixed_version: str,
        run_hour: int = 0,
        clock: Clock = utc_now,
        sleep: Sleep = asyncio.sleep,
    ):
        self.pipeline = pipeline
        self.mixed_version = mixed_version
        self.run_hour = run_hour
        self._clock = clock
        self._sleep = sleep

    async def _guarded(self, what: str, step: Callable[[], Awaitable[None]]) -> bool:
        try:
            await step()
        except Exception:
            logger.exception("Error performing %s", what)
            return False
        return True

    async def publish_stable(self) -> None:
        version = await self.pipeline.mcp.get_latest_version(True)
        await self.pipeline.publish_mappings(version, True)

    async def publish_snapshot(self) -> None:
        version = await self.pipeline.yarn.get_latest_version(True)
        await self.pipeline.publish_mappings(version, False)

    async def publish_mixed(self) -> None:
        version = await self.pipeline.yarn.get_latest_version(False)
        await self.pipeline.publish_mixed_mappings(self.mixed_version, version)

    async def catch_up(self) -> None:
        """Publish any of today's artifacts that do not exist yet."""
        await self._guarded("stable mapping catch-up", self.publish_stable)
        await self._guarded("snapshot mapping catch-up", self.publish_snapshot)
        await self._guarded("mixed mapping catch-up", self.publish_mixed)

    async def _tick(self) -> None:
        version = await self.pipeline.yarn.get_latest_version(True)
        await self.pipeline.publish_mappings(version, False)
        await self.pipeline.publish_mixed_mappings(self.mixed_version, version)

    async def tick(self) -> bool:
        return await self._guarded("periodic mapping push", self._tick)

    def seconds_until_next_run(self, now: Optional[datetime] = None) -> float:
        now = (now or self._clock()).astimezone(timezone.utc)
        next_run = now.replace(hour=self.run_hour, minute=0, second=0, microsecond=0)
        if next_run <= now:
            next_run += timedelta(days=1)
        return (next_run - now).total_seconds()

    async def daily_loop(self, max_ticks: Optional[int] = None) -> None:
        """Run one tick per day; forever unless `max_ticks` is given."""
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            delay = self.seconds_until_next_run()
            logger.info("Next mapping push in %.0f seconds", delay)
            await self._sleep(delay)
            await self.tick()
            ticks += 1

    async def run(self) -> None:
        await self.catch_up()
        await self.daily_loop()


__all__ = ["PublishScheduler"]
