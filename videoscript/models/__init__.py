"""Data models for the VideoScript pipeline."""

from .submission import Submission
from .transcription import BackendTranscript, TranscriptionResult
from .state import (
    UploadStatus,
    UploadState,
    ProcessingState,
    PipelinePhase,
    PipelineSnapshot,
)

__all__ = [
    "Submission",
    "BackendTranscript",
    "TranscriptionResult",
    "UploadStatus",
    "UploadState",
    "ProcessingState",
    "PipelinePhase",
    "PipelineSnapshot",
]
