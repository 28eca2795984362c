"""Unit tests for TranscriptionHistory."""

import pytest
from datetime import datetime, timedelta

from videoscript.models.state import PipelinePhase, PipelineSnapshot, ProcessingState, UploadState, UploadStatus
from videoscript.models.transcription import TranscriptionResult
from videoscript.pipeline.publisher import PipelinePublisher
from videoscript.transcription.static_backend import StaticTranscriptionBackend
from videoscript.services.history_service import (
    HistoryStatus,
    TranscriptionHistory,
    format_duration,
    format_relative_date,
)


@pytest.fixture
def history():
    h = TranscriptionHistory()
    yield h
    h.shutdown()


def make_result(result_id="r-1", created_at=None, text="some transcript"):
    return TranscriptionResult(
        id=result_id,
        text=text,
        language="English",
        source_filename="meeting.mp4",
        duration_seconds=125,
        created_at=created_at or datetime(2024, 5, 1, 12, 0, 0),
        confidence=0.9,
    )


@pytest.mark.unit
class TestFormatting:
    """Test cases for history formatting helpers."""

    @pytest.mark.parametrize("seconds,expected", [
        (0, "0:00"),
        (45, "0:45"),
        (125, "2:05"),
        (3600, "60:00"),
    ])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_format_relative_date(self):
        now = datetime(2024, 5, 10, 9, 0, 0)
        assert format_relative_date(now - timedelta(hours=2), now) == "Today"
        assert format_relative_date(now - timedelta(days=1), now) == "Yesterday"
        assert format_relative_date(now - timedelta(days=3), now) == "3 days ago"
        assert format_relative_date(datetime(2024, 4, 1, 8, 0, 0), now) == "2024-04-01"


@pytest.mark.unit
class TestTranscriptionHistory:
    """Test cases for TranscriptionHistory."""

    def test_records_published_results(self, history):
        publisher = PipelinePublisher()
        publisher.publish_result(make_result(text="abcdef"))

        entry = history.get("r-1")
        assert entry.status is HistoryStatus.COMPLETED
        assert entry.filename == "meeting.mp4"
        assert entry.transcription_length == 6
        assert entry.result.id == "r-1"

    def test_records_failed_runs(self, history):
        PipelinePublisher().publish_phase(PipelineSnapshot(
            run_id=7,
            phase=PipelinePhase.UPLOAD_FAILED,
            upload=UploadState(UploadStatus.ERROR, 40, error="network down"),
            processing=ProcessingState(),
            error="network down",
            filename="clip.mov",
            language="fr",
        ))

        entry = history.get("failed-7")
        assert entry.status is HistoryStatus.FAILED
        assert entry.error == "network down"
        assert entry.filename == "clip.mov"

    def test_ignores_non_failure_phases(self, history):
        PipelinePublisher().publish_phase(PipelineSnapshot(
            run_id=1,
            phase=PipelinePhase.UPLOADING,
            upload=UploadState(UploadStatus.UPLOADING, 0),
            processing=ProcessingState(),
        ))
        assert history.entries() == []

    def test_entries_newest_first(self, history):
        publisher = PipelinePublisher()
        publisher.publish_result(make_result("old", datetime(2024, 5, 1)))
        publisher.publish_result(make_result("new", datetime(2024, 5, 3)))
        publisher.publish_result(make_result("mid", datetime(2024, 5, 2)))

        assert [e.id for e in history.entries()] == ["new", "mid", "old"]

    def test_delete(self, history):
        PipelinePublisher().publish_result(make_result())

        assert history.delete("r-1") is True
        assert history.delete("r-1") is False
        assert history.get("r-1") is None

    def test_records_pipeline_runs(self, scheduler, controller, make_submission, history):
        controller.submit(make_submission(filename="one.mp4"))
        scheduler.run_until_idle()
        controller.submit(make_submission(filename="two.mp4"))
        scheduler.run_until_idle()

        assert sorted(e.filename for e in history.entries()) == ["one.mp4", "two.mp4"]

    def test_failed_entries_use_injected_clock(self, scheduler, make_controller, sample_submission):
        history = TranscriptionHistory(clock=scheduler.now)
        try:
            controller = make_controller(backend=StaticTranscriptionBackend(text=""))
            controller.submit(sample_submission)
            scheduler.run_until_idle()
            failed_at = scheduler.now()

            controller.composer.backend = StaticTranscriptionBackend()
            controller.submit(sample_submission)
            scheduler.run_until_idle()

            entries = history.entries()
            assert [e.status for e in entries] == [HistoryStatus.COMPLETED, HistoryStatus.FAILED]
            assert entries[1].created_at == failed_at
        finally:
            history.shutdown()

    def test_shutdown_stops_recording(self):
        history = TranscriptionHistory()
        history.shutdown()

        PipelinePublisher().publish_result(make_result())
        assert history.entries() == []
