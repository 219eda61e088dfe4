# runner/client.py
from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Optional
from urllib.parse import quote, urljoin

from loguru import logger
from pydantic import ValidationError

from keybot.errors import LogPathNotFound, RunnerError
from keybot.model import JobDescriptor, descriptor_to_dict

from .models import LogPathResponse, MessageResponse


class RunnerClient:
    """HTTP client for a job runner service."""

    def __init__(self, base_url: str, timeout: float = 30.0):
        """
        Initialize runner client.

        Args:
            base_url: Base URL of the runner (e.g., "http://localhost:8080")
            timeout: Seconds to wait for each request
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        data: Optional[dict] = None,
    ) -> dict:
        """
        Make an HTTP request to the runner.

        Returns:
            Parsed JSON response as dictionary

        Raises:
            urllib.error.HTTPError: for non-2xx responses (callers map these)
            RunnerError: on network errors or invalid JSON
        """
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        req_headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        req_data = None
        if data is not None:
            req_data = json.dumps(data).encode("utf-8")

        req = urllib.request.Request(url, data=req_data, headers=req_headers, method=method)
        logger.debug("runner request: {} {}", method, url)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                response_data = response.read().decode("utf-8")
        except urllib.error.HTTPError:
            raise
        except urllib.error.URLError as e:
            raise RunnerError(f"Network error: {e.reason}") from e

        if not response_data:
            return {}
        try:
            return json.loads(response_data)
        except json.JSONDecodeError as e:
            raise RunnerError(f"Invalid JSON response: {e}") from e

    @staticmethod
    def _http_error(e: urllib.error.HTTPError) -> RunnerError:
        error_body = e.read().decode("utf-8") if e.fp else ""
        return RunnerError(f"Runner request failed: {e.code} {e.reason}. {error_body}".rstrip())

    def _message(self, method: str, path: str, data: Optional[dict] = None) -> str:
        try:
            response = self._request(method, path, data=data)
        except urllib.error.HTTPError as e:
            raise self._http_error(e) from e
        try:
            return MessageResponse.model_validate(response).message
        except ValidationError as e:
            raise RunnerError(f"Invalid runner response: {e}") from e

    def start(self, descriptor: JobDescriptor) -> str:
        """Ask the runner to start a job."""
        return self._message("POST", "/jobs", data=descriptor_to_dict(descriptor))

    def stop(self, label: str) -> str:
        """Ask the runner to stop the job with this label."""
        return self._message("POST", f"/jobs/{quote(label, safe='')}/stop")

    def log_path_for_label(self, label: str) -> str:
        """
        Look up the log file of a job.

        Raises:
            LogPathNotFound: if the runner knows no log for this label
            RunnerError: on any other failure
        """
        try:
            response = self._request("GET", f"/jobs/{quote(label, safe='')}/log-path")
        except urllib.error.HTTPError as e:
            if e.code == 404:
                raise LogPathNotFound(label) from e
            raise self._http_error(e) from e
        try:
            return LogPathResponse.model_validate(response).path
        except ValidationError as e:
            raise RunnerError(f"Invalid runner response: {e}") from e
