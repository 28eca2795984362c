"""Transcription history that records the outcome of every finished run."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

from pubsub import pub

from ..models.state import PipelinePhase, PipelineSnapshot
from ..models.transcription import TranscriptionResult
from ..pipeline.publisher import PHASE_TOPIC, RESULT_TOPIC

logger = logging.getLogger(__name__)


class HistoryStatus(Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class HistoryEntry:
    """One finished run as shown in the history list."""
    id: str
    filename: str
    language: str
    duration_seconds: float
    created_at: datetime
    status: HistoryStatus
    transcription_length: int = 0
    error: Optional[str] = None
    result: Optional[TranscriptionResult] = None


def format_duration(seconds: float) -> str:
    """Format seconds as m:ss."""
    total = int(seconds)
    minutes, remaining = divmod(total, 60)
    return f"{minutes}:{remaining:02d}"


def format_relative_date(when: datetime, now: Optional[datetime] = None) -> str:
    """Describe a date relative to now ("Today", "Yesterday", "3 days ago")."""
    now = now or datetime.now()
    days = (now - when).days
    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    return when.date().isoformat()


class TranscriptionHistory:
    """Subscribes to pipeline topics and keeps a record of finished runs."""

    def __init__(self,
                 phase_topic: str = PHASE_TOPIC,
                 result_topic: str = RESULT_TOPIC,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize transcription history.

        Args:
            phase_topic: Topic carrying PipelineSnapshot updates
            result_topic: Topic carrying completed TranscriptionResults
            clock: Time source for failed entries (the pipeline scheduler's `now`)
        """
        self.phase_topic = phase_topic
        self.result_topic = result_topic
        self.clock = clock
        self._entries: Dict[str, HistoryEntry] = {}
        self.lock = threading.RLock()

        pub.subscribe(self._on_phase, phase_topic)
        pub.subscribe(self._on_result, result_topic)
        logger.info(f"TranscriptionHistory subscribed to {phase_topic} and {result_topic}")

    def _on_result(self, result: TranscriptionResult) -> None:
        with self.lock:
            self._entries[result.id] = HistoryEntry(
                id=result.id,
                filename=result.source_filename,
                language=result.language,
                duration_seconds=result.duration_seconds,
                created_at=result.created_at,
                status=HistoryStatus.COMPLETED,
                transcription_length=len(result.text),
                result=result,
            )
        logger.debug(f"History recorded completed run {result.id}")

    def _on_phase(self, snapshot: PipelineSnapshot) -> None:
        if snapshot.phase not in (PipelinePhase.UPLOAD_FAILED, PipelinePhase.PROCESSING_FAILED):
            return
        with self.lock:
            entry_id = f"failed-{snapshot.run_id}"
            self._entries[entry_id] = HistoryEntry(
                id=entry_id,
                filename=snapshot.filename or "",
                language=snapshot.language,
                duration_seconds=0,
                created_at=self.clock(),
                status=HistoryStatus.FAILED,
                error=snapshot.error,
            )
        logger.debug(f"History recorded failed run {snapshot.run_id}: {snapshot.error}")

    def entries(self) -> List[HistoryEntry]:
        """All entries, newest first."""
        with self.lock:
            return sorted(self._entries.values(), key=lambda e: e.created_at, reverse=True)

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        with self.lock:
            return self._entries.get(entry_id)

    def delete(self, entry_id: str) -> bool:
        with self.lock:
            return self._entries.pop(entry_id, None) is not None

    def shutdown(self) -> None:
        """Unsubscribe from pipeline topics."""
        try:
            pub.unsubscribe(self._on_phase, self.phase_topic)
            pub.unsubscribe(self._on_result, self.result_topic)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")
        logger.info("TranscriptionHistory shut down")
