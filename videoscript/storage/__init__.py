"""Storage helpers for VideoScript."""

from .exporter import TranscriptExporter

__all__ = ["TranscriptExporter"]
