"""Transcription backends for VideoScript."""

from .base import AbstractTranscriptionBackend
from .static_backend import StaticTranscriptionBackend, PLACEHOLDER_TEXT

__all__ = [
    "AbstractTranscriptionBackend",
    "StaticTranscriptionBackend",
    "PLACEHOLDER_TEXT",
]
