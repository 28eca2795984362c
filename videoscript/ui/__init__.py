"""Terminal user interface for VideoScript."""

from .progress_display import ConsoleProgressDisplay, format_file_size

__all__ = ["ConsoleProgressDisplay", "format_file_size"]
