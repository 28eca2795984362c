"""Submission data model."""

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

MEDIA_TYPE_PREFIXES = ("video/", "audio/")


@dataclass(frozen=True)
class Submission:
    """A user-selected media file waiting to be uploaded."""
    data: bytes = field(repr=False)
    filename: str
    size: int
    mime_type: str
    duration_seconds: Optional[float] = None  # Known media duration, if the caller probed it

    @property
    def is_media(self) -> bool:
        """Coarse check that the MIME hint names a video or audio file."""
        return self.mime_type.startswith(MEDIA_TYPE_PREFIXES)

    @classmethod
    def from_path(cls, path: str, mime_type: Optional[str] = None) -> "Submission":
        """Build a submission from a file on disk.

        Args:
            path: Path to the media file
            mime_type: MIME hint; guessed from the file name if omitted

        Returns:
            Submission holding the file contents
        """
        file_path = Path(path)
        data = file_path.read_bytes()
        if mime_type is None:
            mime_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        return cls(
            data=data,
            filename=file_path.name,
            size=len(data),
            mime_type=mime_type,
        )
