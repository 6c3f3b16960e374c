"""
Tests for RemoteJobCreator against a mocked requests.post.
"""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
import requests

from app.batch.models import FileCandidate, JobOptions
from app.batch.composer import JobComposer
from app.batch.registry import FileRegistry, counter_ids
from app.batch.remote import DEFAULT_API_URL, RemoteJobCreator, RemoteJobError


def make_request():
    registry = FileRegistry(id_factory=counter_ids())
    registry.intake([FileCandidate("a.pdf", 1000)])
    return JobComposer().compose(registry, JobOptions(name="Job"))


def make_response(status_code: int, body=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


class TestRemoteJobCreator:
    """Tests for RemoteJobCreator.create_job() and __call__."""

    def setup_method(self):
        self.request = make_request()
        self.creator = RemoteJobCreator(url="http://api.test/create-job", token="secret")

    @patch("app.batch.remote.requests.post")
    def test_success_returns_batch_job(self, mock_post):
        mock_post.return_value = make_response(200, {
            "success": True,
            "data": {"batchJob": {"id": "job-1", "status": "pending"}},
        })

        job = self.creator.create_job(self.request)

        assert job == {"id": "job-1", "status": "pending"}
        args, kwargs = mock_post.call_args
        assert args[0] == "http://api.test/create-job"
        assert kwargs["json"] == self.request.to_payload()
        assert kwargs["headers"]["Authorization"] == "Bearer secret"

    @patch("app.batch.remote.requests.post")
    def test_api_error_message_surfaced(self, mock_post):
        mock_post.return_value = make_response(400, {
            "success": False,
            "error": "Maximum 100 files allowed per batch job",
        })

        with pytest.raises(RemoteJobError) as exc_info:
            self.creator.create_job(self.request)

        assert str(exc_info.value) == "Maximum 100 files allowed per batch job"
        assert exc_info.value.status_code == 400

    @patch("app.batch.remote.requests.post")
    def test_non_json_error(self, mock_post):
        mock_post.return_value = make_response(500)

        with pytest.raises(RemoteJobError, match="HTTP 500"):
            self.creator.create_job(self.request)

    @patch("app.batch.remote.requests.post")
    def test_success_flag_false_with_200(self, mock_post):
        mock_post.return_value = make_response(200, {"success": False, "error": "Rate limit exceeded"})

        with pytest.raises(RemoteJobError, match="Rate limit exceeded"):
            self.creator.create_job(self.request)

    @patch("app.batch.remote.requests.post")
    def test_timeout(self, mock_post):
        mock_post.side_effect = requests.exceptions.Timeout()

        with pytest.raises(RemoteJobError, match="timed out"):
            self.creator.create_job(self.request)

    @patch("app.batch.remote.requests.post")
    def test_connection_error(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(RemoteJobError, match="unreachable"):
            self.creator.create_job(self.request)

    @patch("app.batch.remote.requests.post")
    def test_async_call(self, mock_post):
        mock_post.return_value = make_response(200, {"success": True, "data": {"batchJob": {"id": "job-2"}}})

        job = asyncio.run(self.creator(self.request))

        assert job == {"id": "job-2"}

    def test_no_token_no_auth_header(self):
        assert "Authorization" not in RemoteJobCreator()._headers()

    def test_from_env(self):
        creator = RemoteJobCreator.from_env({"BATCH_API_URL": "http://x/y", "BATCH_API_TOKEN": "t"})
        assert creator.url == "http://x/y"
        assert creator.token == "t"

    def test_from_env_defaults(self):
        creator = RemoteJobCreator.from_env({})
        assert creator.url == DEFAULT_API_URL
        assert creator.token is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
