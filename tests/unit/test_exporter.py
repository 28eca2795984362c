"""Unit tests for TranscriptExporter."""

import json
import pytest
from datetime import datetime
from pathlib import Path

from videoscript.models.transcription import TranscriptionResult
from videoscript.storage.exporter import TranscriptExporter


@pytest.fixture
def result():
    return TranscriptionResult(
        id="abc-123",
        text="Bonjour à tous.",
        language="French",
        source_filename="cours.mp4",
        duration_seconds=45,
        created_at=datetime(2024, 5, 1, 12, 0, 0),
        confidence=0.94,
    )


@pytest.mark.unit
class TestTranscriptExporter:
    """Test cases for TranscriptExporter."""

    def test_creates_output_directory(self, temp_data_dir):
        target = Path(temp_data_dir) / "nested" / "exports"
        TranscriptExporter(str(target))
        assert target.is_dir()

    def test_export_text(self, temp_data_dir, result):
        path = TranscriptExporter(temp_data_dir).export_text(result)

        assert Path(path).name == "cours.mp4_transcription.txt"
        assert Path(path).read_text(encoding="utf-8") == "Bonjour à tous."

    def test_export_edited_text(self, temp_data_dir, result):
        path = TranscriptExporter(temp_data_dir).export_text(result, text="Bonjour.")

        assert Path(path).read_text(encoding="utf-8") == "Bonjour."
        assert result.text == "Bonjour à tous."

    def test_export_json(self, temp_data_dir, result):
        path = TranscriptExporter(temp_data_dir).export_json(result)

        assert Path(path).name == "cours.mp4_transcription.json"
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        assert data["id"] == "abc-123"
        assert data["text"] == "Bonjour à tous."
        assert data["language"] == "French"
        assert data["created_at"] == "2024-05-01T12:00:00"

    def test_write_error_propagates(self, temp_data_dir, result):
        exporter = TranscriptExporter(temp_data_dir)
        # A directory in the way of the output file makes open() fail
        (Path(temp_data_dir) / "cours.mp4_transcription.txt").mkdir()

        with pytest.raises(OSError):
            exporter.export_text(result)
