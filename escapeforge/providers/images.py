"""Image generation providers.

An image generator exposes ``generate(prompt, aspect_ratio, size_hint,
reference_image=None) -> bytes`` and a ``mime_type`` attribute describing
the bytes it returns.
"""

from __future__ import annotations
import base64
import hashlib
import html
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import requests

from escapeforge.errors import ExternalCallFailure

logger = logging.getLogger(__name__)

ASPECT_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4")
SIZE_HINTS = {"1K": 1024, "2K": 2048}


def dimensions_for(aspect_ratio: str, size_hint: str) -> Tuple[int, int]:
    """Pixel size for an aspect ratio; the long side follows the size hint.

    The short side is rounded to a multiple of 64, which diffusion models need.
    """
    if aspect_ratio not in ASPECT_RATIOS:
        raise ValueError(f"Unsupported aspect ratio: {aspect_ratio}")
    if size_hint not in SIZE_HINTS:
        raise ValueError(f"Unsupported size hint: {size_hint}")

    w_ratio, h_ratio = (int(part) for part in aspect_ratio.split(":"))
    long_side = SIZE_HINTS[size_hint]
    if w_ratio >= h_ratio:
        short = max(64, round(long_side * h_ratio / w_ratio / 64) * 64)
        return long_side, short
    short = max(64, round(long_side * w_ratio / h_ratio / 64) * 64)
    return short, long_side


class DiffusionImageGenerator:
    """Client for a local diffusion server (POST /generate)."""

    mime_type = "image/png"

    def __init__(self, base_url: str, timeout: float = 300.0, model: Optional[str] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.model = model

    def generate(self, prompt: str, aspect_ratio: str = "16:9", size_hint: str = "1K",
                 reference_image: Optional[bytes] = None) -> bytes:
        width, height = dimensions_for(aspect_ratio, size_hint)
        data: Dict[str, object] = {
            "prompt": prompt,
            "width": width,
            "height": height,
        }
        if self.model:
            data["model"] = self.model
        if reference_image is not None:
            data["reference_image"] = base64.b64encode(reference_image).decode("ascii")

        try:
            response = requests.post(f"{self.base_url}/generate", json=data, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ExternalCallFailure(f"Image request failed: {e}") from e

        # The server either inlines the image or leaves it on its local disk
        if result.get("image_base64"):
            try:
                return base64.b64decode(result["image_base64"])
            except ValueError as e:
                raise ExternalCallFailure(f"Image payload is not valid base64: {e}") from e
        if result.get("image_path"):
            try:
                return Path(result["image_path"]).read_bytes()
            except OSError as e:
                raise ExternalCallFailure(f"Cannot read generated image: {e}") from e

        raise ExternalCallFailure("Image server returned no image")


class PlaceholderImageGenerator:
    """Offline stand-in: a flat SVG card with the start of the prompt on it."""

    mime_type = "image/svg+xml"

    def __init__(self):
        self.calls = []

    def generate(self, prompt: str, aspect_ratio: str = "16:9", size_hint: str = "1K",
                 reference_image: Optional[bytes] = None) -> bytes:
        self.calls.append({"prompt": prompt, "aspect_ratio": aspect_ratio, "size_hint": size_hint,
                           "reference_image": reference_image is not None})
        width, height = dimensions_for(aspect_ratio, size_hint)
        colour = hashlib.sha1(prompt.encode("utf-8")).hexdigest()[:6]
        caption = html.escape(prompt.split(".")[0][:50])
        svg = (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}">'
            f'<rect width="100%" height="100%" fill="#{colour}"/>'
            f'<text x="50%" y="50%" fill="#eeeeee" font-size="{height // 20}" '
            f'text-anchor="middle">{caption}</text></svg>'
        )
        return svg.encode("utf-8")
