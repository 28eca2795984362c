"""Builds the final TranscriptionResult once processing completes."""

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from ..errors import InvalidStateError, ProcessingFailure
from ..languages import LanguageCatalog
from ..models.submission import Submission
from ..models.transcription import TranscriptionResult
from ..transcription.base import AbstractTranscriptionBackend

logger = logging.getLogger(__name__)


class ResultComposer:
    """Calls the transcription backend and assembles the result record."""

    def __init__(self,
                 backend: AbstractTranscriptionBackend,
                 catalog: LanguageCatalog,
                 default_duration_seconds: float = 45,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize result composer.

        Args:
            backend: Transcription backend called once per run
            catalog: Language catalog used to resolve the reported language
            default_duration_seconds: Duration used when the submission has none
            clock: Source of the result timestamp
        """
        self.backend = backend
        self.catalog = catalog
        self.default_duration_seconds = default_duration_seconds
        self.clock = clock
        self._last_run_id: Optional[int] = None

    def compose(self,
                run_id: int,
                submission: Submission,
                upload_ref: str,
                language_selection: str) -> TranscriptionResult:
        """Produce the result for one run.

        Raises:
            InvalidStateError: If a result was already composed for this run
            ProcessingFailure: If the backend fails or returns an unusable transcript
        """
        if run_id == self._last_run_id:
            raise InvalidStateError(f"Result already composed for run {run_id}")
        self._last_run_id = run_id

        logger.info(f"Requesting transcript for {upload_ref} (language={language_selection})")
        transcript = self.backend.transcribe(upload_ref, language_selection)

        if not transcript.text or not transcript.text.strip():
            raise ProcessingFailure("Transcription backend returned empty text")
        if transcript.confidence is not None and not 0.0 <= transcript.confidence <= 1.0:
            raise ProcessingFailure(f"Confidence out of range: {transcript.confidence}")

        duration = submission.duration_seconds
        if duration is None:
            duration = self.default_duration_seconds

        result = TranscriptionResult(
            id=str(uuid.uuid4()),
            text=transcript.text,
            language=self.catalog.resolve(language_selection, transcript.language),
            source_filename=submission.filename,
            duration_seconds=duration,
            created_at=self.clock(),
            confidence=transcript.confidence,
        )
        logger.info(f"Composed result {result.id}: {len(result.text)} characters in {result.language}")
        return result
