"""One cycle: run the pipeline, deliver the batch, record what was delivered."""

import time
from typing import Optional

from .models import CycleReport, RunResult
from .orchestrator import CurationPipeline
from .tracker import NotificationTracker
from .notifiers import Notifier
from .history import StorageError
from .logger import get_logger


class CycleRunner:
    """Drives a pipeline run through delivery and delivery confirmation."""

    def __init__(
        self,
        pipeline: CurationPipeline,
        tracker: NotificationTracker,
        notifier: Optional[Notifier] = None,
        dry_run: bool = False
    ):
        """
        Initialize cycle runner.

        Args:
            pipeline: Curation pipeline
            tracker: Notification-state tracker over the same history store
            notifier: Delivery channel; None behaves like a dry run
            dry_run: Run the pipeline without delivering or marking anything
        """
        self.pipeline = pipeline
        self.tracker = tracker
        self.notifier = notifier
        self.dry_run = dry_run or notifier is None
        self.logger = get_logger()

    async def run_cycle(self) -> CycleReport:
        """
        Run once and deliver the result.

        Items are marked delivered only after the notifier confirmed the
        payload containing them. A failed delivery is not retried; those
        items stay undelivered in history and will not be surfaced again.

        Returns:
            CycleReport; success is False on storage or delivery failure
        """
        start_time = time.time()

        try:
            result = await self.pipeline.run()
        except StorageError as e:
            error_msg = f"CRITICAL: History store failure: {e}"
            self.logger.error(error_msg, exc_info=True)
            return CycleReport(
                success=False,
                delivered=False,
                errors=[error_msg],
                execution_time=time.time() - start_time
            )

        report = CycleReport(success=True, delivered=False, result=result, errors=list(result.errors))

        if result.is_empty:
            self.logger.info("No new items to deliver")
        elif self.dry_run:
            self.logger.info(f"Dry run: skipping delivery of {result.selected} items")
            self._log_batch(result)
        else:
            await self._deliver(result, report)

        report.execution_time = time.time() - start_time
        self.logger.info(
            f"Cycle finished in {report.execution_time:.2f}s: "
            f"{len(report.delivered_identifiers)} delivered, {len(report.errors)} errors"
        )
        return report

    async def _deliver(self, result: RunResult, report: CycleReport) -> None:
        payload = self.notifier.select_payload(result.items)
        self.logger.info(f"Delivering {len(payload)}/{result.selected} items via {self.notifier.name}")

        try:
            delivered = await self.notifier.deliver(payload)
        except Exception as e:
            self.logger.error(f"Notifier raised during delivery: {e}", exc_info=True)
            delivered = False

        if not delivered:
            undelivered = [item.identifier for item in payload]
            error_msg = f"Delivery failed; {len(undelivered)} items left undelivered: {undelivered}"
            self.logger.error(error_msg)
            report.success = False
            report.errors.append(error_msg)
            return

        try:
            self.tracker.confirm_delivered(payload)
        except StorageError as e:
            error_msg = f"CRITICAL: Delivered but could not mark items delivered: {e}"
            self.logger.error(error_msg, exc_info=True)
            report.success = False
            report.errors.append(error_msg)

        # The channel accepted the payload either way
        report.delivered = True
        report.delivered_identifiers = [item.identifier for item in payload]

    def _log_batch(self, result: RunResult) -> None:
        for item in result.items:
            self.logger.info(f"  [{item.category}] {item.display_text} <{item.identifier}>")
