"""In-process upload transport that advances progress on a timer."""

import logging
import uuid
from typing import Optional

from .base import (
    AbstractUploadTransport,
    UploadHandle,
    ProgressCallback,
    CompleteCallback,
    FailureCallback,
)
from ..models.submission import Submission
from ..pipeline.scheduler import Scheduler

logger = logging.getLogger(__name__)


class SimulatedUpload(UploadHandle):
    """One simulated upload ticking toward 100%."""

    def __init__(self,
                 transport: "SimulatedUploadTransport",
                 submission: Submission,
                 on_progress: ProgressCallback,
                 on_complete: CompleteCallback):
        self.transport = transport
        self.submission = submission
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.progress = 0
        self.cancelled = False
        self._timer = None

    def schedule_next_tick(self) -> None:
        self._timer = self.transport.scheduler.schedule(self.transport.interval_ms, self._tick)

    def _tick(self) -> None:
        if self.cancelled:
            return

        self.progress = min(100, self.progress + self.transport.step)
        self.on_progress(self.progress)

        if self.progress >= 100:
            upload_ref = f"sim://{uuid.uuid4().hex}/{self.submission.filename}"
            logger.debug(f"Simulated upload finished: {upload_ref}")
            self.on_complete(upload_ref)
            return

        self.schedule_next_tick()

    def cancel(self) -> None:
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class SimulatedUploadTransport(AbstractUploadTransport):
    """Upload transport that fakes progress: +step every interval_ms."""

    def __init__(self, scheduler: Scheduler, step: int = 10, interval_ms: int = 200):
        """Initialize simulated transport.

        Args:
            scheduler: Timer source for progress ticks
            step: Percentage added per tick
            interval_ms: Delay between ticks in milliseconds
        """
        if not 0 < step <= 100:
            raise ValueError(f"Upload step must be within 1..100, got {step}")
        self.scheduler = scheduler
        self.step = step
        self.interval_ms = interval_ms
        logger.info(f"SimulatedUploadTransport initialized: +{step}% every {interval_ms}ms")

    def start(self,
              submission: Submission,
              on_progress: ProgressCallback,
              on_complete: CompleteCallback,
              on_failure: Optional[FailureCallback] = None) -> SimulatedUpload:
        # The simulation has no failure path; on_failure is accepted for the interface.
        upload = SimulatedUpload(self, submission, on_progress, on_complete)
        upload.schedule_next_tick()
        logger.debug(f"Simulated upload started for {submission.filename} ({submission.size} bytes)")
        return upload
