"""Main application entry point for VideoScript."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from pubsub import pub
from rich.console import Console
from rich.table import Table

from .config import VideoScriptConfig
from .errors import UnsupportedMediaError
from .languages import AUTO_DETECT, LanguageCatalog
from .models.state import PipelinePhase, PipelineSnapshot
from .models.submission import Submission
from .pipeline.publisher import PHASE_TOPIC
from .pipeline.scheduler import AsyncioScheduler
from .services.pipeline_service import PipelineService
from .storage.exporter import TranscriptExporter
from .ui.progress_display import ConsoleProgressDisplay, format_file_size

logger = logging.getLogger(__name__)


class Server:

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None):
        # Load configuration
        self.config = VideoScriptConfig(config_path)
        # Set up logging (override config with command line if specified)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.console = Console()
        self.final_snapshot: Optional[PipelineSnapshot] = None
        self._done: Optional[asyncio.Event] = None

    def transcribe(self, file_path: str, language: Optional[str] = None,
                   output_dir: Optional[str] = None) -> int:
        """Run one file through the pipeline and return the process exit code."""
        submission = Submission.from_path(file_path)
        self.console.print(f"📼 {submission.filename} ({format_file_size(submission.size)})")
        return asyncio.run(self._run_pipeline(submission, language, output_dir))

    async def _run_pipeline(self, submission: Submission, language: Optional[str],
                            output_dir: Optional[str]) -> int:
        scheduler = AsyncioScheduler()
        service = PipelineService(self.config, scheduler)
        display = ConsoleProgressDisplay(console=self.console)
        self._done = asyncio.Event()
        pub.subscribe(self._on_phase, PHASE_TOPIC)

        try:
            if language:
                service.controller.set_language(language)
            service.controller.submit(submission)
            await self._done.wait()
        finally:
            try:
                pub.unsubscribe(self._on_phase, PHASE_TOPIC)
            except Exception as e:
                logger.warning(f"Error during unsubscribe: {e}")
            display.shutdown()
            service.shutdown()

        snapshot = self.final_snapshot
        if snapshot is None or snapshot.phase is not PipelinePhase.COMPLETED:
            return 1

        if output_dir:
            exporter = TranscriptExporter(output_dir)
            text_path = exporter.export_text(snapshot.result)
            exporter.export_json(snapshot.result)
            self.console.print(f"💾 Saved transcript to {text_path}")
        return 0

    def _on_phase(self, snapshot: PipelineSnapshot) -> None:
        if snapshot.phase.is_terminal or snapshot.phase is PipelinePhase.IDLE:
            self.final_snapshot = snapshot
            self._done.set()

    def list_languages(self) -> None:
        catalog = LanguageCatalog(fallback=self.config.get('language.fallback', 'English'))
        table = Table(title="Supported languages")
        table.add_column("Code")
        table.add_column("Name")
        table.add_column("Native name")
        table.add_row(AUTO_DETECT, "Auto-detect", f"falls back to {catalog.fallback}")
        for lang in catalog.languages:
            table.add_row(lang.code, lang.name, lang.native_name)
        self.console.print(table)


def setup_logging(config, level: str = "INFO") -> None:

    """Set up logging configuration from YAML config."""
    # Get log file path from config
    log_file_path = config.get('logging.file_path', 'data/logs/videoscript.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    # Set up handlers
    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        # Console never drops below WARNING so progress bars stay readable
        console_handler.setLevel(max(logging.WARNING, getattr(logging, level.upper())))
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    # aiohttp logs every request at INFO; keep upload traffic out of the log unless debugging
    aiohttp_level = logging.NOTSET if root_logger.level <= logging.DEBUG else logging.WARNING
    logging.getLogger("aiohttp").setLevel(aiohttp_level)

    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("VideoScript starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info(f"Upload endpoint: {config.get('upload.endpoint') or 'simulated'}")
    logger.info("="*50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="VideoScript - convert video to text"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="VideoScript v0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    transcribe = subparsers.add_parser("transcribe", help="Upload and transcribe a media file")
    transcribe.add_argument("file", type=str, help="Video or audio file to transcribe")
    transcribe.add_argument(
        "--language",
        type=str,
        help=f"Language code or '{AUTO_DETECT}' (default: from config)"
    )
    transcribe.add_argument(
        "--endpoint",
        type=str,
        help="Upload endpoint URL (overrides config; omit to simulate the upload)"
    )
    transcribe.add_argument(
        "--output",
        type=str,
        help="Directory to export the transcript into"
    )
    transcribe.add_argument(
        "--export",
        action="store_true",
        help="Export the transcript into export.output_directory from the config"
    )

    subparsers.add_parser("languages", help="List supported languages")
    return parser


def main() -> None:
    """Main entry point for VideoScript application."""
    args = build_parser().parse_args()

    try:
        server = Server(args.config, args.log_level)
        if args.command == "languages":
            server.list_languages()
            return

        if args.endpoint:
            server.config.set('upload.endpoint', args.endpoint)
        output_dir = args.output
        if output_dir is None and args.export:
            output_dir = server.config.get_export_directory()
        exit_code = server.transcribe(args.file, args.language, output_dir)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except (FileNotFoundError, UnsupportedMediaError) as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
