"""Pipeline state publisher for pub/sub event publishing."""

import logging
from pubsub import pub

from ..models.state import PipelineSnapshot, ProcessingState, UploadState
from ..models.transcription import TranscriptionResult

logger = logging.getLogger(__name__)

UPLOAD_TOPIC = "pipeline.upload"
PROCESSING_TOPIC = "pipeline.processing"
PHASE_TOPIC = "pipeline.phase"
RESULT_TOPIC = "pipeline.result"


class PipelinePublisher:
    """Publishes pipeline state using pubsub.pub for display consumers."""

    def __init__(self,
                 upload_topic: str = UPLOAD_TOPIC,
                 processing_topic: str = PROCESSING_TOPIC,
                 phase_topic: str = PHASE_TOPIC,
                 result_topic: str = RESULT_TOPIC):
        """Initialize pipeline publisher.

        Args:
            upload_topic: Topic receiving UploadState updates
            processing_topic: Topic receiving ProcessingState updates
            phase_topic: Topic receiving PipelineSnapshot on phase changes
            result_topic: Topic receiving completed TranscriptionResults
        """
        self.upload_topic = upload_topic
        self.processing_topic = processing_topic
        self.phase_topic = phase_topic
        self.result_topic = result_topic
        logger.info(f"PipelinePublisher initialized with topics: {upload_topic}, "
                    f"{processing_topic}, {phase_topic}, {result_topic}")

    def publish_upload(self, state: UploadState) -> None:
        pub.sendMessage(self.upload_topic, state=state)

    def publish_processing(self, state: ProcessingState) -> None:
        pub.sendMessage(self.processing_topic, state=state)

    def publish_phase(self, snapshot: PipelineSnapshot) -> None:
        pub.sendMessage(self.phase_topic, snapshot=snapshot)
        logger.debug(f"Published phase {snapshot.phase.value} for run {snapshot.run_id}")

    def publish_result(self, result: TranscriptionResult) -> None:
        pub.sendMessage(self.result_topic, result=result)
        logger.debug(f"Published transcription result: {result.id}")
