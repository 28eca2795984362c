"""Integration tests for HttpUploadTransport against a local aiohttp server."""

import asyncio
import pytest

from aiohttp import web
from aiohttp import test_utils

from videoscript.errors import UploadFailure
from videoscript.models.state import UploadStatus
from videoscript.pipeline.upload_tracker import UploadTracker
from videoscript.transport.http import HttpUploadTransport


class UploadEndpoint:
    """Minimal upload endpoint recording what it receives."""

    def __init__(self, status=200, payload=None, delay=0.0):
        self.status = status
        self.payload = {"upload_id": "up-42"} if payload is None else payload
        self.delay = delay
        self.requests = []

    async def handle(self, request):
        body = await request.read()
        self.requests.append((request.headers.copy(), body))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.status >= 300:
            return web.Response(status=self.status, text="storage quota exceeded")
        return web.json_response(self.payload)

    def app(self):
        app = web.Application()
        app.router.add_post("/upload", self.handle)
        return app


async def run_upload(endpoint, submission, chunk_size=1024, cancel_after=None):
    """Upload through the transport and collect every callback."""
    progress, completed, failures = [], [], []
    async with test_utils.TestServer(endpoint.app()) as server:
        transport = HttpUploadTransport(str(server.make_url("/upload")), chunk_size=chunk_size,
                                        headers={"Authorization": "Bearer token"})
        handle = transport.start(submission, progress.append, completed.append, failures.append)
        if cancel_after is not None:
            await asyncio.sleep(cancel_after)
            handle.cancel()
        await asyncio.wait([handle.task], timeout=5)
        if cancel_after is not None:
            await asyncio.sleep(endpoint.delay)
    return progress, completed, failures


@pytest.mark.integration
class TestHttpUploadTransport:
    """Test cases for HttpUploadTransport."""

    def test_successful_upload(self, make_submission):
        endpoint = UploadEndpoint()
        submission = make_submission(size=4096)

        progress, completed, failures = asyncio.run(run_upload(endpoint, submission))

        assert completed == ["up-42"]
        assert failures == []
        assert progress == [25, 50, 75, 99]
        headers, body = endpoint.requests[0]
        assert body == submission.data
        assert headers["Content-Type"] == "video/mp4"
        assert headers["X-Filename"] == "presentation_recording.mp4"
        assert headers["Authorization"] == "Bearer token"

    def test_reference_from_alternate_keys(self, make_submission):
        endpoint = UploadEndpoint(payload={"url": "https://cdn.example/abc.mp4"})
        _, completed, _ = asyncio.run(run_upload(endpoint, make_submission()))
        assert completed == ["https://cdn.example/abc.mp4"]

    def test_rejected_upload_reports_failure(self, make_submission):
        endpoint = UploadEndpoint(status=507)

        _, completed, failures = asyncio.run(run_upload(endpoint, make_submission()))

        assert completed == []
        assert len(failures) == 1
        assert isinstance(failures[0], UploadFailure)
        assert "507" in str(failures[0])

    def test_missing_reference_reports_failure(self, make_submission):
        endpoint = UploadEndpoint(payload={"status": "ok"})

        _, completed, failures = asyncio.run(run_upload(endpoint, make_submission()))

        assert completed == []
        assert "reference" in str(failures[0])

    def test_connection_error_reports_failure(self, make_submission):
        async def upload_to_closed_port():
            failures = []
            server = test_utils.TestServer(web.Application())
            await server.start_server()
            url = str(server.make_url("/upload"))
            await server.close()

            handle = HttpUploadTransport(url).start(make_submission(), lambda p: None,
                                                    lambda ref: None, failures.append)
            await asyncio.wait_for(handle.task, timeout=5)
            return failures

        failures = asyncio.run(upload_to_closed_port())

        assert len(failures) == 1
        assert "transport error" in str(failures[0])

    def test_cancel_suppresses_callbacks(self, make_submission):
        endpoint = UploadEndpoint(delay=0.3)

        _, completed, failures = asyncio.run(
            run_upload(endpoint, make_submission(), cancel_after=0.1))

        assert completed == []
        assert failures == []

    def test_tracker_over_http(self, make_submission):
        async def track():
            endpoint = UploadEndpoint()
            async with test_utils.TestServer(endpoint.app()) as server:
                tracker = UploadTracker(HttpUploadTransport(str(server.make_url("/upload")), chunk_size=512))
                finished = asyncio.get_running_loop().create_future()
                states = []
                tracker.begin(make_submission(size=2048), on_change=states.append,
                              on_done=lambda ref, failure: finished.set_result((ref, failure)))
                outcome = await asyncio.wait_for(finished, timeout=5)
            return tracker, states, outcome

        tracker, states, (upload_ref, failure) = asyncio.run(track())

        assert upload_ref == "up-42"
        assert failure is None
        assert tracker.state.status is UploadStatus.SUCCESS
        assert [s.progress for s in states] == [0, 25, 50, 75, 99, 100]
