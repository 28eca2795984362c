"""VideoScript - media upload and transcription pipeline."""

__version__ = "0.1.0"
