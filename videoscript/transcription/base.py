"""Abstract base classes for transcription backends."""

from abc import ABC, abstractmethod
import logging

from ..models.transcription import BackendTranscript

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Abstract base class for transcription backends."""

    @abstractmethod
    def transcribe(self, upload_ref: str, language: str) -> BackendTranscript:
        """Transcribe an uploaded file.

        Args:
            upload_ref: Reference returned by the upload transport
            language: Selected language code or the "auto" sentinel

        Returns:
            BackendTranscript with text, confidence and resolved language

        Raises:
            ProcessingFailure: If the backend cannot produce a transcript
        """
        pass

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize backend resources and verify configuration.

        Returns:
            True if initialization successful, False otherwise
        """
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Clean up backend resources."""
        pass
