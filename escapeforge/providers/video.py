"""Video generation providers for room transitions.

A video generator exposes ``generate(prompt, first_frame, last_frame,
aspect_ratio) -> bytes``. The call blocks until the clip is ready; any job
polling happens inside the provider.
"""

from __future__ import annotations
import base64
import hashlib
import logging
import time
from typing import List, Optional

import requests

from escapeforge.errors import ExternalCallFailure

logger = logging.getLogger(__name__)


class PollingVideoGenerator:
    """Client for a job-based video server.

    POST /generate starts a job, GET /operations/<id> reports its status,
    GET /operations/<id>/video downloads the finished clip.
    """

    mime_type = "video/mp4"

    def __init__(self, base_url: str, poll_interval: float = 10.0, timeout: float = 900.0,
                 request_timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.request_timeout = request_timeout

    def generate(self, prompt: str, first_frame: bytes, last_frame: bytes,
                 aspect_ratio: str = "16:9") -> bytes:
        operation_id = self._start(prompt, first_frame, last_frame, aspect_ratio)
        self._wait(operation_id)
        return self._download(operation_id)

    def _start(self, prompt: str, first_frame: bytes, last_frame: bytes, aspect_ratio: str) -> str:
        payload = {
            "prompt": prompt,
            "first_frame": base64.b64encode(first_frame).decode("ascii"),
            "last_frame": base64.b64encode(last_frame).decode("ascii"),
            "aspect_ratio": aspect_ratio,
        }
        try:
            response = requests.post(f"{self.base_url}/generate", json=payload,
                                     timeout=self.request_timeout)
            response.raise_for_status()
            operation_id = response.json().get("operation")
        except (requests.RequestException, ValueError) as e:
            raise ExternalCallFailure(f"Video job submission failed: {e}") from e
        if not operation_id:
            raise ExternalCallFailure("Video server did not return an operation id")
        return str(operation_id)

    def _wait(self, operation_id: str) -> None:
        deadline = time.monotonic() + self.timeout
        while True:
            try:
                response = requests.get(f"{self.base_url}/operations/{operation_id}",
                                        timeout=self.request_timeout)
                response.raise_for_status()
                status = response.json()
            except (requests.RequestException, ValueError) as e:
                raise ExternalCallFailure(f"Video status poll failed: {e}") from e

            if status.get("error"):
                raise ExternalCallFailure(f"Video job {operation_id} failed: {status['error']}")
            if status.get("done"):
                return
            if time.monotonic() >= deadline:
                raise ExternalCallFailure(f"Video job {operation_id} timed out after {self.timeout}s")

            logger.info(f"Waiting for video job {operation_id}...")
            time.sleep(self.poll_interval)

    def _download(self, operation_id: str) -> bytes:
        try:
            response = requests.get(f"{self.base_url}/operations/{operation_id}/video",
                                    timeout=self.request_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ExternalCallFailure(f"Video download failed: {e}") from e
        if not response.content:
            raise ExternalCallFailure(f"Video job {operation_id} produced an empty clip")
        return response.content


class StubVideoGenerator:
    """Offline stand-in returning a deterministic byte string per request.

    ``fail_on`` lists call indexes (0-based) that raise ExternalCallFailure.
    """

    mime_type = "video/mp4"

    def __init__(self, fail_on: Optional[List[int]] = None):
        self.fail_on = set(fail_on or [])
        self.calls: List[str] = []

    def generate(self, prompt: str, first_frame: bytes, last_frame: bytes,
                 aspect_ratio: str = "16:9") -> bytes:
        index = len(self.calls)
        self.calls.append(prompt)
        if index in self.fail_on:
            raise ExternalCallFailure(f"Stub video failure on call {index}")
        digest = hashlib.sha1(first_frame + last_frame + prompt.encode("utf-8")).hexdigest()
        return f"STUBVIDEO:{aspect_ratio}:{digest}".encode("ascii")
