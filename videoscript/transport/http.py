"""HTTP upload transport streaming the file body with aiohttp."""

import asyncio
import logging
from typing import AsyncIterator, Dict, Optional

import aiohttp

from .base import (
    AbstractUploadTransport,
    UploadHandle,
    ProgressCallback,
    CompleteCallback,
    FailureCallback,
)
from ..errors import UploadFailure
from ..models.submission import Submission

logger = logging.getLogger(__name__)


class HttpUpload(UploadHandle):
    """Handle wrapping the asyncio task that performs the upload."""

    def __init__(self, task: asyncio.Task):
        self.task = task

    def cancel(self) -> None:
        if not self.task.done():
            self.task.cancel()


class HttpUploadTransport(AbstractUploadTransport):
    """Uploads submissions to an HTTP endpoint with a streamed POST body."""

    def __init__(self,
                 endpoint: str,
                 chunk_size: int = 64 * 1024,
                 headers: Optional[Dict[str, str]] = None):
        """Initialize HTTP transport.

        Args:
            endpoint: URL accepting the raw file body
            chunk_size: Bytes sent per body chunk (one progress report per chunk)
            headers: Extra request headers, e.g. authorization
        """
        self.endpoint = endpoint
        self.chunk_size = chunk_size
        self.headers = headers or {}
        logger.info(f"HttpUploadTransport initialized with endpoint: {endpoint}")

    def start(self,
              submission: Submission,
              on_progress: ProgressCallback,
              on_complete: CompleteCallback,
              on_failure: FailureCallback) -> HttpUpload:
        task = asyncio.ensure_future(self._upload(submission, on_progress, on_complete, on_failure))
        return HttpUpload(task)

    async def _body(self, submission: Submission, on_progress: ProgressCallback) -> AsyncIterator[bytes]:
        total = len(submission.data)
        sent = 0
        for offset in range(0, total, self.chunk_size):
            chunk = submission.data[offset:offset + self.chunk_size]
            yield chunk
            sent += len(chunk)
            # 100% is reserved for the server acknowledging the upload
            on_progress(min(99, sent * 100 // total))

    async def _upload(self,
                      submission: Submission,
                      on_progress: ProgressCallback,
                      on_complete: CompleteCallback,
                      on_failure: FailureCallback) -> None:
        headers = {
            "Content-Type": submission.mime_type,
            "X-Filename": submission.filename,
            **self.headers,
        }
        logger.info(f"Uploading {submission.filename} ({submission.size} bytes) to {self.endpoint}")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.endpoint,
                                        data=self._body(submission, on_progress),
                                        headers=headers) as response:
                    if response.status >= 300:
                        error_text = await response.text()
                        raise UploadFailure(f"Upload rejected: {response.status} - {error_text}")
                    payload = await response.json(content_type=None)
        except UploadFailure as e:
            logger.error(f"Upload of {submission.filename} failed: {e}")
            on_failure(e)
            return
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Upload of {submission.filename} failed: {e}")
            on_failure(UploadFailure(f"Upload transport error: {e}"))
            return

        upload_ref = self._extract_reference(payload)
        if upload_ref is None:
            on_failure(UploadFailure("Upload response did not include a reference"))
            return

        on_complete(upload_ref)

    @staticmethod
    def _extract_reference(payload) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        for key in ("upload_id", "id", "url"):
            if payload.get(key):
                return str(payload[key])
        return None
