"""Unit tests for ProcessingStageSequencer."""

import pytest

from videoscript.config import DEFAULT_STAGES
from videoscript.errors import InvalidStateError, ProcessingFailure
from videoscript.models.state import ProcessingState, UploadState, UploadStatus
from videoscript.pipeline.stage_sequencer import ProcessingStageSequencer

UPLOADED = UploadState(UploadStatus.SUCCESS, 100)


@pytest.mark.unit
class TestProcessingStageSequencer:
    """Test cases for ProcessingStageSequencer."""

    def test_default_stages(self, scheduler):
        sequencer = ProcessingStageSequencer(scheduler)
        assert sequencer.stages == DEFAULT_STAGES
        assert sequencer.stage_count == 5
        assert sequencer.state == ProcessingState()

    def test_empty_stage_list_rejected(self, scheduler):
        with pytest.raises(ValueError):
            ProcessingStageSequencer(scheduler, stages=[])

    @pytest.mark.parametrize("status", [UploadStatus.IDLE, UploadStatus.UPLOADING, UploadStatus.ERROR])
    def test_begin_requires_successful_upload(self, scheduler, status):
        sequencer = ProcessingStageSequencer(scheduler)
        progress = 0 if status is UploadStatus.IDLE else 40
        with pytest.raises(InvalidStateError):
            sequencer.begin(UploadState(status, progress))
        assert sequencer.is_active is False

    def test_begin_while_active_raises(self, scheduler):
        sequencer = ProcessingStageSequencer(scheduler)
        sequencer.begin(UPLOADED)
        with pytest.raises(InvalidStateError):
            sequencer.begin(UPLOADED)

    def test_walks_every_stage_in_order(self, scheduler):
        sequencer = ProcessingStageSequencer(scheduler, stages=["a", "b", "c"], interval_ms=100)
        states = []
        completed = []

        sequencer.begin(UPLOADED, on_change=states.append, on_complete=lambda: completed.append(True))
        assert sequencer.state.current_stage_label == "a"

        scheduler.advance(299)
        assert [s.current_stage_label for s in states] == ["a", "b", "c"]
        assert completed == []

        scheduler.advance(1)
        assert sequencer.state == ProcessingState()
        assert completed == [True]

        scheduler.advance(1000)
        assert completed == [True]
        assert len(states) == 4

    def test_cancel_stops_ticking(self, scheduler):
        sequencer = ProcessingStageSequencer(scheduler, interval_ms=100)
        completed = []
        sequencer.begin(UPLOADED, on_complete=lambda: completed.append(True))
        scheduler.advance(150)

        sequencer.cancel()

        assert sequencer.state == ProcessingState()
        scheduler.advance(10_000)
        assert completed == []
        assert scheduler.pending_count == 0

    def test_fail_records_error(self, scheduler):
        sequencer = ProcessingStageSequencer(scheduler, interval_ms=100)
        states = []
        sequencer.begin(UPLOADED, on_change=states.append)
        scheduler.advance(100)

        sequencer.fail(ProcessingFailure("stage crashed"))

        assert sequencer.state.active is False
        assert sequencer.state.current_stage_index is None
        assert sequencer.state.error == "stage crashed"
        assert states[-1] == sequencer.state

    def test_reset_allows_restart(self, scheduler):
        sequencer = ProcessingStageSequencer(scheduler, interval_ms=100)
        sequencer.begin(UPLOADED)
        sequencer.reset()

        sequencer.begin(UPLOADED)
        assert sequencer.state.current_stage_index == 0
