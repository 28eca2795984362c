"""Pipeline controller: the state machine from submission to result."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from ..errors import (
    ProcessingFailure,
    StaleRunError,
    UnsupportedMediaError,
    UploadFailure,
)
from ..languages import AUTO_DETECT, LanguageCatalog
from ..models.state import (
    PipelinePhase,
    PipelineSnapshot,
    ProcessingState,
    UploadState,
)
from ..models.submission import Submission
from ..models.transcription import TranscriptionResult
from ..transcription.base import AbstractTranscriptionBackend
from ..transport.base import AbstractUploadTransport
from .publisher import PipelinePublisher
from .result_composer import ResultComposer
from .scheduler import Scheduler
from .stage_sequencer import ProcessingStageSequencer
from .upload_tracker import UploadTracker

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Bookkeeping for the run currently owning the pipeline."""
    run_id: int
    submission: Submission
    language: str
    started_at: datetime
    upload_ref: Optional[str] = None
    timer: Any = None  # settle/result delay handle
    deadline: Any = None  # phase timeout handle


class PipelineController:
    """Wires submission -> upload -> processing -> result.

    Only one run exists at a time. Every callback scheduled for a run carries
    its run id and is dropped once a newer run (or a cancel) has bumped the
    counter, so a superseded run can never touch the current state.
    """

    def __init__(self,
                 scheduler: Scheduler,
                 transport: AbstractUploadTransport,
                 backend: AbstractTranscriptionBackend,
                 catalog: Optional[LanguageCatalog] = None,
                 publisher: Optional[PipelinePublisher] = None,
                 stages: Optional[list] = None,
                 stage_interval_ms: int = 1500,
                 settle_delay_ms: int = 1000,
                 result_delay_ms: int = 2000,
                 default_duration_seconds: float = 45,
                 upload_timeout_ms: Optional[int] = None,
                 processing_timeout_ms: Optional[int] = None,
                 language: str = AUTO_DETECT):
        self.scheduler = scheduler
        self.catalog = catalog or LanguageCatalog()
        self.publisher = publisher or PipelinePublisher()
        self.settle_delay_ms = settle_delay_ms
        self.result_delay_ms = result_delay_ms
        self.upload_timeout_ms = upload_timeout_ms
        self.processing_timeout_ms = processing_timeout_ms

        self.tracker = UploadTracker(transport)
        self.sequencer = ProcessingStageSequencer(scheduler, stages, stage_interval_ms)
        self.composer = ResultComposer(backend, self.catalog,
                                       default_duration_seconds=default_duration_seconds,
                                       clock=scheduler.now)

        self._language = language
        self._run_id = 0
        self._run: Optional[RunContext] = None
        self._phase = PipelinePhase.IDLE
        self._result: Optional[TranscriptionResult] = None
        self._last_result: Optional[TranscriptionResult] = None
        self._error: Optional[str] = None

        logger.info("PipelineController initialized")

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def language(self) -> str:
        return self._language

    def set_language(self, code: str) -> None:
        """Select the transcription language; takes effect on the next submission."""
        if not self.catalog.is_supported(code):
            logger.warning(f"Language '{code}' is not in the catalog; it will be reported verbatim")
        self._language = code
        logger.info(f"Language selection set to: {code}")

    def submit(self, submission: Submission) -> int:
        """Start a new run, superseding any run in progress.

        Args:
            submission: Media file to upload and transcribe

        Returns:
            Id of the new run

        Raises:
            UnsupportedMediaError: If the submission is not a media file
        """
        if not submission.is_media:
            raise UnsupportedMediaError(
                f"{submission.filename} is not a media file ({submission.mime_type})")

        if self._phase.is_active:
            logger.info(f"Superseding run {self._run_id} with new submission {submission.filename}")
        self._run_id += 1
        self._discard_run()

        self._run = RunContext(
            run_id=self._run_id,
            submission=submission,
            language=self._language,
            started_at=self.scheduler.now(),
        )
        self._result = None
        self._error = None
        logger.info(f"Run {self._run_id}: submitted {submission.filename} "
                    f"({submission.size} bytes, language={self._language})")

        self._set_phase(PipelinePhase.UPLOADING)
        run_id = self._run_id
        self._arm_deadline(run_id, self.upload_timeout_ms, PipelinePhase.UPLOADING)
        self.tracker.begin(
            submission,
            on_change=self._bind(run_id, self._on_upload_changed),
            on_done=self._bind(run_id, self._on_upload_done),
        )
        return run_id

    def cancel(self) -> bool:
        """Cancel the active run and return to idle.

        Returns:
            True if a run was cancelled, False if nothing was active
        """
        if not self._phase.is_active:
            logger.warning("No active run to cancel")
            return False

        logger.info(f"Run {self._run_id}: cancelled by caller")
        self._run_id += 1
        self._discard_run()
        self._set_phase(PipelinePhase.IDLE)
        return True

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def phase(self) -> PipelinePhase:
        return self._phase

    @property
    def upload_state(self) -> UploadState:
        return self.tracker.state

    @property
    def processing_state(self) -> ProcessingState:
        return self.sequencer.state

    @property
    def result(self) -> Optional[TranscriptionResult]:
        """Result of the current run, if it completed."""
        return self._result

    @property
    def last_result(self) -> Optional[TranscriptionResult]:
        """Most recent published result; survives later submissions."""
        return self._last_result

    def snapshot(self) -> PipelineSnapshot:
        run = self._run
        return PipelineSnapshot(
            run_id=self._run_id,
            phase=self._phase,
            upload=self.tracker.state,
            processing=self.sequencer.state,
            result=self._result,
            error=self._error,
            filename=run.submission.filename if run else None,
            language=run.language if run else self._language,
        )

    # ------------------------------------------------------------------
    # Run token discipline
    # ------------------------------------------------------------------

    def _require_current(self, run_id: int) -> None:
        if run_id != self._run_id or self._run is None:
            raise StaleRunError(run_id, self._run_id)

    def _bind(self, run_id: int, handler: Callable[..., None]) -> Callable[..., None]:
        """Wrap a handler so it only runs while `run_id` is current."""
        def guarded(*args):
            try:
                self._require_current(run_id)
            except StaleRunError as e:
                logger.debug(f"Dropping stale callback {handler.__name__}: {e}")
                return
            handler(*args)
        return guarded

    def _schedule(self, run_id: int, delay_ms: int, handler: Callable[..., None], *args):
        return self.scheduler.schedule(delay_ms, self._bind(run_id, handler), *args)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _on_upload_changed(self, state: UploadState) -> None:
        self.publisher.publish_upload(state)

    def _on_upload_done(self, upload_ref: Optional[str], failure: Optional[UploadFailure]) -> None:
        run = self._run
        self._clear_deadline()

        if failure is not None:
            self._error = str(failure)
            logger.error(f"Run {run.run_id}: upload failed: {failure}")
            self._set_phase(PipelinePhase.UPLOAD_FAILED)
            return

        run.upload_ref = upload_ref
        logger.info(f"Run {run.run_id}: upload finished, processing in {self.settle_delay_ms}ms")
        run.timer = self._schedule(run.run_id, self.settle_delay_ms, self._start_processing)

    def _start_processing(self) -> None:
        run = self._run
        run.timer = None
        self._set_phase(PipelinePhase.PROCESSING)
        self._arm_deadline(run.run_id, self.processing_timeout_ms, PipelinePhase.PROCESSING)
        self.sequencer.begin(
            self.tracker.state,
            on_change=self._bind(run.run_id, self._on_processing_changed),
            on_complete=self._bind(run.run_id, self._on_processing_complete),
        )

    def _on_processing_changed(self, state: ProcessingState) -> None:
        self.publisher.publish_processing(state)

    def _on_processing_complete(self) -> None:
        run = self._run
        logger.info(f"Run {run.run_id}: stages complete, composing result in {self.result_delay_ms}ms")
        run.timer = self._schedule(run.run_id, self.result_delay_ms, self._compose_result)

    def _compose_result(self) -> None:
        run = self._run
        run.timer = None
        self._clear_deadline()

        try:
            result = self.composer.compose(run.run_id, run.submission, run.upload_ref, run.language)
        except ProcessingFailure as e:
            self._fail_processing(e)
            return
        except Exception as e:
            logger.error(f"Run {run.run_id}: transcription backend raised: {e}", exc_info=True)
            self._fail_processing(ProcessingFailure(f"Transcription backend error: {e}"))
            return

        self._result = result
        self._last_result = result
        logger.info(f"Run {run.run_id}: completed ({result.id})")
        self._set_phase(PipelinePhase.COMPLETED)
        self.publisher.publish_result(result)

    def _fail_processing(self, failure: ProcessingFailure) -> None:
        run = self._run
        if run.timer is not None:
            run.timer.cancel()
            run.timer = None
        self._error = str(failure)
        logger.error(f"Run {run.run_id}: processing failed: {failure}")
        self.sequencer.fail(failure)
        self._set_phase(PipelinePhase.PROCESSING_FAILED)

    def _arm_deadline(self, run_id: int, timeout_ms: Optional[int], phase: PipelinePhase) -> None:
        if timeout_ms:
            self._run.deadline = self._schedule(run_id, timeout_ms, self._on_deadline, phase)

    def _clear_deadline(self) -> None:
        if self._run.deadline is not None:
            self._run.deadline.cancel()
            self._run.deadline = None

    def _on_deadline(self, phase: PipelinePhase) -> None:
        self._run.deadline = None
        if self._phase is not phase:
            return
        logger.warning(f"Run {self._run_id}: {phase.value} exceeded its deadline")
        if phase is PipelinePhase.UPLOADING and self.tracker.is_uploading:
            self.tracker.fail(UploadFailure("Upload timed out"))
        elif phase is PipelinePhase.PROCESSING:
            self._fail_processing(ProcessingFailure("Processing timed out"))

    def _discard_run(self) -> None:
        """Cancel every pending timer of the current run and clear its state."""
        run = self._run
        if run is not None:
            for handle in (run.timer, run.deadline):
                if handle is not None:
                    handle.cancel()
            run.timer = None
            run.deadline = None
        # Callers bump the run id first so teardown callbacks are already stale
        if self.tracker.is_uploading:
            self.tracker.cancel()
        self.tracker.reset()
        self.sequencer.reset()
        self._run = None
        self._result = None
        self._error = None

    def _set_phase(self, phase: PipelinePhase) -> None:
        previous = self._phase
        self._phase = phase
        if previous is not phase:
            logger.info(f"Pipeline phase: {previous.value} -> {phase.value}")
        self.publisher.publish_phase(self.snapshot())
