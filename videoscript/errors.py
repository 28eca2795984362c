"""Exceptions raised by the VideoScript pipeline."""


class VideoScriptError(Exception):
    """Base exception for pipeline errors"""


class InvalidStateError(VideoScriptError):
    """Raised when an operation is invoked in a state that forbids it"""


class UploadFailure(VideoScriptError):
    """Raised when the upload transport reports a failure"""


class ProcessingFailure(VideoScriptError):
    """Raised when the transcription backend or a processing stage fails"""


class StaleRunError(VideoScriptError):
    """Raised internally when a callback fires for a superseded run"""

    def __init__(self, run_id: int, current_run_id: int):
        super().__init__(f"Run {run_id} is no longer current (current run: {current_run_id})")
        self.run_id = run_id
        self.current_run_id = current_run_id


class UnsupportedMediaError(VideoScriptError, ValueError):
    """Raised when a submission is not a media file"""
