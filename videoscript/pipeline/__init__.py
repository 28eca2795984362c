"""Upload-and-processing pipeline for VideoScript."""

from .scheduler import Scheduler, AsyncioScheduler, VirtualScheduler
from .upload_tracker import UploadTracker
from .stage_sequencer import ProcessingStageSequencer
from .result_composer import ResultComposer
from .publisher import PipelinePublisher
from .controller import PipelineController

__all__ = [
    "Scheduler",
    "AsyncioScheduler",
    "VirtualScheduler",
    "UploadTracker",
    "ProcessingStageSequencer",
    "ResultComposer",
    "PipelinePublisher",
    "PipelineController",
]
