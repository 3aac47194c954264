"""Text generation providers.

A text generator is any object with ``generate(instruction, model_hint=None) -> str``.
Replies are untrusted text; parsing and validation happen downstream.
"""

from __future__ import annotations
import logging
from typing import Callable, List, Optional, Union

import requests

from escapeforge.errors import ExternalCallFailure

logger = logging.getLogger(__name__)


class OllamaTextGenerator:
    """Ollama HTTP client for room generation."""

    def __init__(self, base_url: str, model: str, timeout: float,
                 temperature: float = 0.7, max_tokens: int = 4096):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

    def is_available(self) -> bool:
        """Check if Ollama is running and reachable."""
        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=min(2, self.timeout))
            return response.status_code == 200
        except requests.RequestException:
            return False

    def generate(self, instruction: str, model_hint: Optional[str] = None) -> str:
        payload = {
            "model": model_hint or self.model,
            "prompt": instruction,
            "stream": False,
            "format": "json",
            "options": {
                "temperature": float(self.temperature),
                "num_predict": int(self.max_tokens),
            }
        }

        try:
            response = requests.post(
                f"{self.base_url}/api/generate",
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            result = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ExternalCallFailure(f"Ollama request failed: {e}") from e

        text = result.get("response")
        if not isinstance(text, str):
            raise ExternalCallFailure("Ollama reply has no 'response' text")
        return text.strip()


class ScriptedTextGenerator:
    """Returns queued replies in order; records every instruction it receives.

    Each queued item is either a reply string, an exception instance to raise,
    or a callable ``(instruction) -> str``.
    """

    def __init__(self, replies: List[Union[str, Exception, Callable[[str], str]]]):
        self.replies = list(replies)
        self.calls: List[str] = []

    def generate(self, instruction: str, model_hint: Optional[str] = None) -> str:
        self.calls.append(instruction)
        if not self.replies:
            raise ExternalCallFailure("No scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(instruction)
        return reply
