"""Terminal display of pipeline progress and results."""

import logging
import threading
from typing import Optional

from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn
from rich.table import Table
from rich.text import Text

from ..models.state import PipelinePhase, PipelineSnapshot, ProcessingState, UploadState
from ..models.transcription import TranscriptionResult
from ..pipeline.publisher import PHASE_TOPIC, PROCESSING_TOPIC, UPLOAD_TOPIC
from ..services.history_service import format_duration

logger = logging.getLogger(__name__)


def format_file_size(size_bytes: int) -> str:
    """Human readable file size (e.g. 50 MB)."""
    if size_bytes <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size_bytes)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


def render_result(result: TranscriptionResult) -> Panel:
    """Panel showing a finished transcription with its metadata."""
    meta = Table.grid(padding=(0, 2))
    meta.add_column(style="bold")
    meta.add_column()
    meta.add_row("File", result.source_filename)
    meta.add_row("Language", result.language)
    meta.add_row("Duration", format_duration(result.duration_seconds))
    if result.confidence is not None:
        meta.add_row("Confidence", f"{result.confidence:.0%}")
    meta.add_row("Created", result.created_at.strftime("%Y-%m-%d %H:%M:%S"))

    body = Table.grid()
    body.add_row(meta)
    body.add_row(Text(""))
    body.add_row(Text(result.text))
    return Panel(body, title="✅ Transcription", border_style="green")


def render_error(snapshot: PipelineSnapshot) -> Panel:
    """Panel showing why a run failed."""
    stage = "Upload" if snapshot.phase is PipelinePhase.UPLOAD_FAILED else "Processing"
    message = Text(f"{stage} failed: {snapshot.error or 'unknown error'}\n", style="red")
    message.append("Submit the file again to retry.", style="dim")
    return Panel(message, title="❌ Error", border_style="red")


class ConsoleProgressDisplay:
    """Subscribes to pipeline topics and renders them with rich."""

    def __init__(self,
                 console: Optional[Console] = None,
                 auto_refresh: bool = True):
        """Initialize console display.

        Args:
            console: Rich console to render to
            auto_refresh: Let rich refresh the progress bars from its own thread
        """
        self.console = console or Console()
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            console=self.console,
            auto_refresh=auto_refresh,
        )
        self.upload_task: Optional[TaskID] = None
        self.stage_task: Optional[TaskID] = None
        self.final_snapshot: Optional[PipelineSnapshot] = None
        self.finished = threading.Event()
        self._started = False

        pub.subscribe(self._on_upload, UPLOAD_TOPIC)
        pub.subscribe(self._on_processing, PROCESSING_TOPIC)
        pub.subscribe(self._on_phase, PHASE_TOPIC)

    def _on_upload(self, state: UploadState) -> None:
        if self.upload_task is None:
            self.upload_task = self.progress.add_task("Uploading...", total=100)
        self.progress.update(self.upload_task, completed=state.progress)

    def _on_processing(self, state: ProcessingState) -> None:
        if not state.active:
            return
        description = f"[{state.current_stage_index + 1}] {state.current_stage_label}"
        if self.stage_task is None:
            self.stage_task = self.progress.add_task(description, total=None)
        else:
            self.progress.update(self.stage_task, description=description)

    def _on_phase(self, snapshot: PipelineSnapshot) -> None:
        if snapshot.phase is PipelinePhase.UPLOADING:
            self._reset_tasks()
            if not self._started:
                self.progress.start()
                self._started = True
            return

        if snapshot.phase is PipelinePhase.PROCESSING or not self._started:
            return

        self._stop()
        self.final_snapshot = snapshot
        if snapshot.phase is PipelinePhase.COMPLETED and snapshot.result is not None:
            self.console.print(render_result(snapshot.result))
        elif snapshot.phase in (PipelinePhase.UPLOAD_FAILED, PipelinePhase.PROCESSING_FAILED):
            self.console.print(render_error(snapshot))
        else:
            self.console.print("Cancelled.", style="yellow")
        self.finished.set()

    def _reset_tasks(self) -> None:
        for task in (self.upload_task, self.stage_task):
            if task is not None:
                self.progress.remove_task(task)
        self.upload_task = None
        self.stage_task = None
        self.finished.clear()

    def _stop(self) -> None:
        if self._started:
            self.progress.stop()
            self._started = False

    def shutdown(self) -> None:
        self._stop()
        try:
            pub.unsubscribe(self._on_upload, UPLOAD_TOPIC)
            pub.unsubscribe(self._on_processing, PROCESSING_TOPIC)
            pub.unsubscribe(self._on_phase, PHASE_TOPIC)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")
