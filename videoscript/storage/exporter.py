"""Transcript export to downloadable files."""

import json
import logging
from pathlib import Path
from typing import Optional

from ..models.transcription import TranscriptionResult

logger = logging.getLogger(__name__)


class TranscriptExporter:
    """Writes transcription results to text and JSON files."""

    def __init__(self, output_dir: str = "./data/exports"):
        """Initialize exporter.

        Args:
            output_dir: Directory receiving exported files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"TranscriptExporter initialized with output_dir: {self.output_dir}")

    def export_text(self, result: TranscriptionResult, text: Optional[str] = None) -> str:
        """Save transcript text as `<filename>_transcription.txt`.

        Args:
            result: Result to export
            text: Edited text to write instead of the published text

        Returns:
            Full path to the written file
        """
        file_path = self.output_dir / f"{result.source_filename}_transcription.txt"
        content = result.text if text is None else text

        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Error exporting transcript: {e}")
            raise

        logger.info(f"Transcript exported: {file_path} ({len(content)} characters)")
        return str(file_path)

    def export_json(self, result: TranscriptionResult) -> str:
        """Save the result and its metadata as `<filename>_transcription.json`."""
        file_path = self.output_dir / f"{result.source_filename}_transcription.json"

        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Error exporting transcript metadata: {e}")
            raise

        logger.info(f"Transcript metadata exported: {file_path}")
        return str(file_path)
