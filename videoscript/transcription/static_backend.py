"""Transcription backend that returns a fixed demonstration transcript."""

import logging
from typing import Optional

from .base import AbstractTranscriptionBackend
from ..models.transcription import BackendTranscript

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = (
    "Welcome to VideoScript AI demonstration. This is a sample transcription showing how "
    "your video content would be converted to text using advanced AI speech recognition "
    "technology. The system supports multiple languages including English, French, and "
    "Arabic, with high accuracy rates and real-time processing capabilities."
)


class StaticTranscriptionBackend(AbstractTranscriptionBackend):
    """Backend stand-in used until a real speech service is connected."""

    def __init__(self,
                 text: str = PLACEHOLDER_TEXT,
                 confidence: Optional[float] = 0.94,
                 detected_language: Optional[str] = None):
        self.text = text
        self.confidence = confidence
        self.detected_language = detected_language
        self.calls = 0

    def initialize(self) -> bool:
        logger.info("Static transcription backend ready")
        return True

    def transcribe(self, upload_ref: str, language: str) -> BackendTranscript:
        self.calls += 1
        logger.debug(f"Static transcript for {upload_ref} (language={language})")
        return BackendTranscript(
            text=self.text,
            confidence=self.confidence,
            language=self.detected_language,
        )

    def cleanup(self) -> None:
        pass
