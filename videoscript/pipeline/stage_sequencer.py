"""Processing stage sequencer that walks the stage labels at a fixed cadence."""

import logging
from typing import Callable, List, Optional

from ..config import DEFAULT_STAGES
from ..errors import InvalidStateError, ProcessingFailure
from ..models.state import ProcessingState, UploadState, UploadStatus
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

StateCallback = Callable[[ProcessingState], None]


class ProcessingStageSequencer:
    """Advances through an ordered list of stages, one per interval.

    Stages are informational: the sequencer never skips or reorders them and
    the current index only ever grows by one per tick. Once the last stage
    has had its interval the sequencer deactivates and signals completion.
    """

    def __init__(self,
                 scheduler: Scheduler,
                 stages: Optional[List[str]] = None,
                 interval_ms: int = 1500):
        """Initialize stage sequencer.

        Args:
            scheduler: Timer source for stage ticks
            stages: Ordered stage labels (defaults to DEFAULT_STAGES)
            interval_ms: Time spent on each stage in milliseconds
        """
        self.scheduler = scheduler
        self.stages = list(stages if stages is not None else DEFAULT_STAGES)
        if not self.stages:
            raise ValueError("At least one processing stage is required")
        self.interval_ms = interval_ms
        self.state = ProcessingState()

        self._timer = None
        self._on_change: Optional[StateCallback] = None
        self._on_complete: Optional[Callable[[], None]] = None

    @property
    def stage_count(self) -> int:
        return len(self.stages)

    @property
    def is_active(self) -> bool:
        return self.state.active

    def begin(self,
              upload_state: UploadState,
              on_change: Optional[StateCallback] = None,
              on_complete: Optional[Callable[[], None]] = None) -> None:
        """Start at the first stage.

        Args:
            upload_state: Upload state of the run; must be successful
            on_change: Called with every new ProcessingState
            on_complete: Called once after the last stage

        Raises:
            InvalidStateError: If the upload has not succeeded or the sequencer is active
        """
        if upload_state.status is not UploadStatus.SUCCESS:
            raise InvalidStateError(
                f"Processing requires a successful upload (upload is {upload_state.status.value})")
        if self.state.active:
            raise InvalidStateError("Processing is already active")

        self._on_change = on_change
        self._on_complete = on_complete
        logger.info(f"Processing started: {self.stage_count} stages, {self.interval_ms}ms each")
        self._enter_stage(0)

    def cancel(self) -> None:
        """Stop ticking and clear the current stage."""
        self._stop_timer()
        self._on_complete = None
        if self.state.active:
            logger.info(f"Processing cancelled at stage {self.state.current_stage_index}")
        self._set_state(ProcessingState())

    def fail(self, failure: ProcessingFailure) -> None:
        """Stop ticking and record a processing error."""
        self._stop_timer()
        self._on_complete = None
        logger.error(f"Processing failed: {failure}")
        self._set_state(ProcessingState(error=str(failure)))

    def reset(self) -> None:
        self._stop_timer()
        self._on_change = None
        self._on_complete = None
        self.state = ProcessingState()

    def _enter_stage(self, index: int) -> None:
        label = self.stages[index]
        logger.debug(f"Stage {index + 1}/{self.stage_count}: {label}")
        self._set_state(ProcessingState(active=True,
                                        current_stage_index=index,
                                        current_stage_label=label))
        self._timer = self.scheduler.schedule(self.interval_ms, self._tick)

    def _tick(self) -> None:
        self._timer = None
        if not self.state.active:
            return

        next_index = self.state.current_stage_index + 1
        if next_index < self.stage_count:
            self._enter_stage(next_index)
            return

        logger.info("All processing stages complete")
        self._set_state(ProcessingState())
        on_complete, self._on_complete = self._on_complete, None
        if on_complete:
            on_complete()

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _set_state(self, state: ProcessingState) -> None:
        self.state = state
        if self._on_change:
            self._on_change(state)
