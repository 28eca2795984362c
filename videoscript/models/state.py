"""Pipeline state models published to display consumers."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .transcription import TranscriptionResult


class UploadStatus(Enum):
    """Status of the upload for the current run."""
    IDLE = "idle"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


class PipelinePhase(Enum):
    """Phase of the pipeline state machine."""
    IDLE = "idle"
    UPLOADING = "uploading"
    UPLOAD_FAILED = "upload_failed"
    PROCESSING = "processing"
    PROCESSING_FAILED = "processing_failed"
    COMPLETED = "completed"

    @property
    def is_active(self) -> bool:
        return self in (PipelinePhase.UPLOADING, PipelinePhase.PROCESSING)

    @property
    def is_terminal(self) -> bool:
        return self in (PipelinePhase.UPLOAD_FAILED,
                        PipelinePhase.PROCESSING_FAILED,
                        PipelinePhase.COMPLETED)


@dataclass(frozen=True)
class UploadState:
    """Upload progress for a single in-flight file."""
    status: UploadStatus = UploadStatus.IDLE
    progress: int = 0  # 0..100
    error: Optional[str] = None

    def __post_init__(self):
        if not 0 <= self.progress <= 100:
            raise ValueError(f"Upload progress out of range: {self.progress}")
        if self.status is UploadStatus.SUCCESS and self.progress != 100:
            raise ValueError("Successful upload must report 100% progress")
        if self.status is UploadStatus.IDLE and self.progress != 0:
            raise ValueError("Idle upload must report 0% progress")


@dataclass(frozen=True)
class ProcessingState:
    """Current processing stage, cleared whenever the sequencer is inactive."""
    active: bool = False
    current_stage_index: Optional[int] = None
    current_stage_label: str = ""
    error: Optional[str] = None

    def __post_init__(self):
        if not self.active and self.current_stage_index is not None:
            raise ValueError("Inactive processing state cannot have a current stage")
        if self.active and self.current_stage_index is None:
            raise ValueError("Active processing state requires a current stage")


@dataclass(frozen=True)
class PipelineSnapshot:
    """Unified pipeline state read by display collaborators."""
    run_id: int
    phase: PipelinePhase
    upload: UploadState
    processing: ProcessingState
    result: Optional[TranscriptionResult] = None
    error: Optional[str] = None
    filename: Optional[str] = None
    language: str = "auto"
