"""Transcription-related data models."""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class BackendTranscript:
    """Raw answer from a transcription backend."""
    text: str
    confidence: Optional[float] = None
    language: Optional[str] = None  # Resolved language name, if the backend detected one


@dataclass(frozen=True)
class TranscriptionResult:
    """Final transcription record for one completed run."""
    id: str
    text: str
    language: str
    source_filename: str
    duration_seconds: float
    created_at: datetime
    confidence: Optional[float] = None

    def with_text(self, text: str) -> "TranscriptionResult":
        """Return an edited copy; published results are never mutated."""
        return replace(self, text=text)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "language": self.language,
            "source_filename": self.source_filename,
            "duration_seconds": self.duration_seconds,
            "created_at": self.created_at.isoformat(),
            "confidence": self.confidence,
        }
