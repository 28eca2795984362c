"""Pipeline service that builds the controller and its collaborators from config."""

import logging
from typing import Optional

from ..config import VideoScriptConfig
from ..languages import LanguageCatalog
from ..pipeline.controller import PipelineController
from ..pipeline.publisher import PipelinePublisher
from ..pipeline.scheduler import Scheduler
from ..transcription.base import AbstractTranscriptionBackend
from ..transcription.static_backend import StaticTranscriptionBackend
from ..transport.base import AbstractUploadTransport
from ..transport.http import HttpUploadTransport
from ..transport.simulated import SimulatedUploadTransport

logger = logging.getLogger(__name__)


class PipelineService:
    """Service that owns the pipeline controller and its lifecycle."""

    def __init__(self,
                 config: VideoScriptConfig,
                 scheduler: Scheduler,
                 transport: Optional[AbstractUploadTransport] = None,
                 backend: Optional[AbstractTranscriptionBackend] = None,
                 publisher: Optional[PipelinePublisher] = None):
        """Initialize pipeline service.

        Args:
            config: Application configuration
            scheduler: Timer source shared by all pipeline components
            transport: Upload transport; built from config if omitted
            backend: Transcription backend; static placeholder if omitted
            publisher: State publisher; default pipeline topics if omitted
        """
        self.config = config
        self.scheduler = scheduler
        self.transport = transport or self._create_transport()
        self.backend = backend or StaticTranscriptionBackend()
        self.catalog = LanguageCatalog(fallback=config.get('language.fallback', 'English'))

        if not self.backend.initialize():
            raise RuntimeError("Transcription backend failed to initialize")

        self.controller = PipelineController(
            scheduler=scheduler,
            transport=self.transport,
            backend=self.backend,
            catalog=self.catalog,
            publisher=publisher,
            stages=config.get_stages(),
            stage_interval_ms=config.get('processing.stage_interval_ms', 1500),
            settle_delay_ms=config.get('pipeline.settle_delay_ms', 1000),
            result_delay_ms=config.get('pipeline.result_delay_ms', 2000),
            default_duration_seconds=config.get('result.default_duration_seconds', 45),
            upload_timeout_ms=config.get('upload.timeout_ms'),
            processing_timeout_ms=config.get('processing.timeout_ms'),
            language=config.get('language.default', 'auto'),
        )
        logger.info("PipelineService ready")

    def _create_transport(self) -> AbstractUploadTransport:
        endpoint = self.config.get('upload.endpoint')
        if endpoint:
            logger.info(f"Using HTTP upload transport: {endpoint}")
            return HttpUploadTransport(
                endpoint=endpoint,
                chunk_size=self.config.get('upload.chunk_size', 64 * 1024),
            )

        logger.info("No upload endpoint configured, using simulated transport")
        return SimulatedUploadTransport(
            self.scheduler,
            step=self.config.get('upload.step', 10),
            interval_ms=self.config.get('upload.tick_interval_ms', 200),
        )

    def shutdown(self) -> None:
        """Cancel any active run and release the backend."""
        if self.controller.phase.is_active:
            self.controller.cancel()
        try:
            self.backend.cleanup()
        except Exception as e:
            logger.warning(f"Error cleaning up transcription backend: {e}")
        logger.info("PipelineService shut down")
