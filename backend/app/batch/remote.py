"""
HTTP job creator for the remote batch job API.

POSTs the JobRequest payload to the create-job endpoint. The endpoint
answers {"success": true, "data": {"batchJob": {...}}} or
{"success": false, "error": "..."}.

No retries: a failed call surfaces to the user, who can submit again.
"""

import asyncio
import logging
import os
from typing import Any, Dict, Mapping, Optional

import requests

from .errors import BatchError
from .models import JobRequest

logger = logging.getLogger(__name__)


ENV_API_URL = "BATCH_API_URL"
ENV_API_TOKEN = "BATCH_API_TOKEN"
DEFAULT_API_URL = "http://localhost:3000/api/batch/create-job"


class RemoteJobError(BatchError):
    """The remote API refused or failed to create the job."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RemoteJobCreator:
    """Async-callable job creator backed by requests."""

    def __init__(self, url: str = DEFAULT_API_URL, token: Optional[str] = None, timeout: float = 30.0):
        self.url = url
        self.token = token
        self.timeout = timeout

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RemoteJobCreator":
        env = os.environ if environ is None else environ
        return cls(
            url=env.get(ENV_API_URL) or DEFAULT_API_URL,
            token=env.get(ENV_API_TOKEN) or None,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def create_job(self, request: JobRequest) -> Dict[str, Any]:
        """
        Blocking call to the create-job endpoint.

        Returns:
            The created batch job record

        Raises:
            RemoteJobError: If the request fails or the API reports failure
        """
        try:
            resp = requests.post(
                self.url,
                json=request.to_payload(),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise RemoteJobError("Job API timed out")
        except requests.exceptions.RequestException as e:
            raise RemoteJobError(f"Job API unreachable: {e}")

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if not resp.ok or not body.get("success"):
            message = body.get("error") or f"Failed to create batch job (HTTP {resp.status_code})"
            logger.warning(f"Job API refused '{request.name}': {resp.status_code} {message}")
            raise RemoteJobError(message, status_code=resp.status_code)

        return body.get("data", {}).get("batchJob", {})

    async def __call__(self, request: JobRequest) -> Dict[str, Any]:
        # requests is blocking; keep the event loop free
        return await asyncio.to_thread(self.create_job, request)
