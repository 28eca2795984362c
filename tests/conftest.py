"""Pytest configuration and fixtures for VideoScript tests."""

import pytest
import tempfile
import logging
from datetime import datetime

from pubsub import pub

from videoscript.languages import LanguageCatalog
from videoscript.models.submission import Submission
from videoscript.pipeline.controller import PipelineController
from videoscript.pipeline.publisher import (
    UPLOAD_TOPIC,
    PROCESSING_TOPIC,
    PHASE_TOPIC,
    RESULT_TOPIC,
)
from videoscript.pipeline.scheduler import VirtualScheduler
from videoscript.transcription.static_backend import StaticTranscriptionBackend
from videoscript.transport.simulated import SimulatedUploadTransport


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def scheduler():
    """Deterministic scheduler starting at a fixed instant."""
    return VirtualScheduler(start=datetime(2024, 5, 1, 12, 0, 0))


@pytest.fixture
def make_submission():
    """Factory for in-memory media submissions."""
    def _make(filename="presentation_recording.mp4", size=1024, mime_type="video/mp4",
              duration_seconds=None):
        return Submission(
            data=b'\x00' * size,
            filename=filename,
            size=size,
            mime_type=mime_type,
            duration_seconds=duration_seconds,
        )
    return _make


@pytest.fixture
def sample_submission(make_submission):
    return make_submission()


class PipelineRecorder:
    """Captures everything published on the pipeline topics."""

    def __init__(self):
        self.uploads = []
        self.processing = []
        self.phases = []
        self.results = []
        pub.subscribe(self.on_upload, UPLOAD_TOPIC)
        pub.subscribe(self.on_processing, PROCESSING_TOPIC)
        pub.subscribe(self.on_phase, PHASE_TOPIC)
        pub.subscribe(self.on_result, RESULT_TOPIC)

    def on_upload(self, state):
        self.uploads.append(state)

    def on_processing(self, state):
        self.processing.append(state)

    def on_phase(self, snapshot):
        self.phases.append(snapshot)

    def on_result(self, result):
        self.results.append(result)

    @property
    def phase_values(self):
        return [snapshot.phase for snapshot in self.phases]

    def close(self):
        pub.unsubscribe(self.on_upload, UPLOAD_TOPIC)
        pub.unsubscribe(self.on_processing, PROCESSING_TOPIC)
        pub.unsubscribe(self.on_phase, PHASE_TOPIC)
        pub.unsubscribe(self.on_result, RESULT_TOPIC)


@pytest.fixture
def recorder():
    """Subscribe a recorder to every pipeline topic for the test's duration."""
    rec = PipelineRecorder()
    yield rec
    rec.close()


@pytest.fixture
def backend():
    return StaticTranscriptionBackend()


@pytest.fixture
def make_controller(scheduler, backend):
    """Factory for controllers wired to the virtual scheduler and simulated upload."""
    def _make(transport=None, **kwargs):
        return PipelineController(
            scheduler=scheduler,
            transport=transport or SimulatedUploadTransport(scheduler),
            backend=kwargs.pop("backend", backend),
            catalog=kwargs.pop("catalog", LanguageCatalog()),
            **kwargs,
        )
    return _make


@pytest.fixture
def controller(make_controller):
    return make_controller()
