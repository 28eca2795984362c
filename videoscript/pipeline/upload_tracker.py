"""Upload tracker owning the progress state of one in-flight file."""

import logging
from typing import Callable, Optional

from ..errors import InvalidStateError, UploadFailure
from ..models.state import UploadState, UploadStatus
from ..models.submission import Submission
from ..transport.base import AbstractUploadTransport, UploadHandle

logger = logging.getLogger(__name__)

StateCallback = Callable[[UploadState], None]
# Called with (upload_ref, None) on success or (None, failure) on error
DoneCallback = Callable[[Optional[str], Optional[UploadFailure]], None]


class UploadTracker:
    """Drives an upload transport and keeps UploadState consistent."""

    def __init__(self, transport: AbstractUploadTransport):
        """Initialize upload tracker.

        Args:
            transport: Transport that performs the actual upload
        """
        self.transport = transport
        self.state = UploadState()
        self.upload_ref: Optional[str] = None

        self._handle: Optional[UploadHandle] = None
        self._attempt = 0
        self._on_change: Optional[StateCallback] = None
        self._on_done: Optional[DoneCallback] = None

    @property
    def is_uploading(self) -> bool:
        return self.state.status is UploadStatus.UPLOADING

    def begin(self,
              submission: Submission,
              on_change: Optional[StateCallback] = None,
              on_done: Optional[DoneCallback] = None) -> None:
        """Start uploading a submission.

        Args:
            submission: File to upload
            on_change: Called with every new UploadState
            on_done: Called once when the upload succeeds or fails

        Raises:
            InvalidStateError: If the tracker is not idle
        """
        if self.state.status is not UploadStatus.IDLE:
            raise InvalidStateError(f"Cannot begin upload while {self.state.status.value}")

        self._attempt += 1
        attempt = self._attempt
        self._on_change = on_change
        self._on_done = on_done
        self.upload_ref = None

        logger.info(f"Starting upload of {submission.filename} ({submission.size} bytes)")
        self._set_state(UploadState(UploadStatus.UPLOADING, 0))
        try:
            self._handle = self.transport.start(
                submission,
                on_progress=lambda percent: self._on_progress(attempt, percent),
                on_complete=lambda upload_ref: self._on_complete(attempt, upload_ref),
                on_failure=lambda failure: self._on_failure(attempt, failure),
            )
        except Exception as e:
            logger.error(f"Upload transport failed to start: {e}", exc_info=True)
            self._attempt += 1
            self._handle = None
            self._finish_with_failure(UploadFailure(f"Upload could not start: {e}"))

    def cancel(self) -> None:
        """Stop the in-flight upload and return to idle.

        Raises:
            InvalidStateError: If no upload is in progress
        """
        if not self.is_uploading:
            raise InvalidStateError(f"Cannot cancel upload while {self.state.status.value}")

        logger.info("Cancelling upload")
        self._stop_transport()
        self._on_done = None
        self._set_state(UploadState())

    def fail(self, failure: UploadFailure) -> None:
        """Abort the in-flight upload with an error."""
        if not self.is_uploading:
            raise InvalidStateError(f"Cannot fail upload while {self.state.status.value}")
        self._stop_transport()
        self._finish_with_failure(failure)

    def reset(self) -> None:
        """Return a finished tracker to idle."""
        if self.is_uploading:
            raise InvalidStateError("Cannot reset while uploading; cancel first")
        self._on_change = None
        self._on_done = None
        self.upload_ref = None
        self.state = UploadState()

    def _stop_transport(self) -> None:
        # Bumping the attempt makes late transport callbacks no-ops
        self._attempt += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _on_progress(self, attempt: int, percent: int) -> None:
        if attempt != self._attempt or not self.is_uploading:
            return
        progress = max(self.state.progress, min(100, int(percent)))
        if progress == self.state.progress:
            return
        logger.debug(f"Upload progress: {progress}%")
        self._set_state(UploadState(UploadStatus.UPLOADING, progress))

    def _on_complete(self, attempt: int, upload_ref: str) -> None:
        if attempt != self._attempt or not self.is_uploading:
            return
        self._handle = None
        self.upload_ref = upload_ref
        logger.info(f"Upload complete: {upload_ref}")
        self._set_state(UploadState(UploadStatus.SUCCESS, 100))
        self._notify_done(upload_ref, None)

    def _on_failure(self, attempt: int, failure: UploadFailure) -> None:
        if attempt != self._attempt or not self.is_uploading:
            return
        self._handle = None
        self._finish_with_failure(failure)

    def _finish_with_failure(self, failure: UploadFailure) -> None:
        logger.error(f"Upload failed: {failure}")
        self._set_state(UploadState(UploadStatus.ERROR, self.state.progress, error=str(failure)))
        self._notify_done(None, failure)

    def _notify_done(self, upload_ref: Optional[str], failure: Optional[UploadFailure]) -> None:
        on_done, self._on_done = self._on_done, None
        if on_done:
            on_done(upload_ref, failure)

    def _set_state(self, state: UploadState) -> None:
        self.state = state
        if self._on_change:
            self._on_change(state)
