"""Abstract base classes for upload transports."""

from abc import ABC, abstractmethod
from typing import Callable
import logging

from ..errors import UploadFailure
from ..models.submission import Submission

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
CompleteCallback = Callable[[str], None]
FailureCallback = Callable[[UploadFailure], None]


class UploadHandle(ABC):
    """Handle for one in-flight upload."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the upload; no further callbacks are delivered."""
        pass


class AbstractUploadTransport(ABC):
    """Abstract base class for upload transports."""

    @abstractmethod
    def start(self,
              submission: Submission,
              on_progress: ProgressCallback,
              on_complete: CompleteCallback,
              on_failure: FailureCallback) -> UploadHandle:
        """Start uploading a submission.

        Args:
            submission: File to upload
            on_progress: Called with the uploaded percentage (0..100)
            on_complete: Called once with the upload reference on success
            on_failure: Called once with an UploadFailure on error

        Returns:
            UploadHandle that can cancel the upload
        """
        pass
