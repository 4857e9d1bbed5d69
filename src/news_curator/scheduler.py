"""Scheduler for periodic curation cycles."""

import asyncio
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .models import CycleReport
from .runner import CycleRunner
from .logger import get_logger


class Scheduler:
    """Runs curation cycles on a daily time or a fixed interval, never overlapping."""

    def __init__(self, runner: CycleRunner, run_time: Optional[str] = None, interval_minutes: int = 60):
        """
        Initialize scheduler.

        Args:
            runner: Cycle runner
            run_time: Daily run time in HH:MM format (24-hour); takes precedence
            interval_minutes: Minutes between cycles when run_time is not set
        """
        self.runner = runner
        self.run_time = run_time
        self.interval_minutes = interval_minutes
        self.logger = get_logger()

        if run_time:
            try:
                hours, minutes = run_time.split(':')
                self.trigger = CronTrigger(hour=int(hours), minute=int(minutes))
            except ValueError:
                raise ValueError(f"Invalid run_time format: {run_time}. Use HH:MM format.")
            self.description = f"daily at {run_time}"
        else:
            self.trigger = IntervalTrigger(minutes=interval_minutes)
            self.description = f"every {interval_minutes} minutes"

        self.scheduler = AsyncIOScheduler()
        self._stopped: Optional[asyncio.Event] = None

    def start(self) -> None:
        """Register the cycle job and start the scheduler on the running loop."""
        self.logger.info(f"Starting scheduler: cycles will run {self.description}")

        self.scheduler.add_job(
            self._run_cycle_wrapper,
            trigger=self.trigger,
            id='curation_cycle',
            name='News Curation Cycle',
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        self.logger.info("Scheduler started successfully")

    async def serve(self) -> None:
        """Start the scheduler and block until stop() is called."""
        self._stopped = asyncio.Event()
        self.start()
        try:
            await self._stopped.wait()
        finally:
            if self.scheduler.running:
                self.scheduler.shutdown(wait=False)

    def stop(self) -> None:
        """Stop the scheduler."""
        self.logger.info("Stopping scheduler")
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        if self._stopped is not None:
            self._stopped.set()
        self.logger.info("Scheduler stopped")

    async def run_once(self) -> CycleReport:
        """Execute one cycle immediately."""
        self.logger.info("Running curation cycle once (manual execution)")
        return await self.runner.run_cycle()

    async def _run_cycle_wrapper(self) -> None:
        """Wrapper for scheduled cycle execution."""
        try:
            await self.runner.run_cycle()
        except Exception as e:
            self.logger.error(f"Scheduled cycle failed: {e}", exc_info=True)
