"""Services layer for VideoScript application logic."""

from .pipeline_service import PipelineService
from .history_service import TranscriptionHistory, HistoryEntry, HistoryStatus

__all__ = [
    "PipelineService",
    "TranscriptionHistory",
    "HistoryEntry",
    "HistoryStatus",
]
