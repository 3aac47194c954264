"""Bootstrap utilities: build the story store, providers and orchestrator from config."""
from __future__ import annotations
import logging
from typing import Optional

from config import (
    get_data_dir,
    get_image_base_url,
    get_image_timeout,
    get_images_enabled,
    get_max_room_attempts,
    get_min_objects,
    get_ollama_base_url,
    get_ollama_max_tokens,
    get_ollama_model,
    get_ollama_temperature,
    get_ollama_timeout,
    get_transitions_enabled,
    get_video_base_url,
    get_video_poll_interval,
    get_video_timeout,
)
from escapeforge.generation import ContentRequester, StoryOrchestrator
from escapeforge.providers import (
    DiffusionImageGenerator,
    OfflineTextGenerator,
    OllamaTextGenerator,
    PlaceholderImageGenerator,
    PollingVideoGenerator,
    StubVideoGenerator,
)
from escapeforge.storage import StoryStore

logger = logging.getLogger(__name__)


def build_store(data_dir: Optional[str] = None) -> StoryStore:
    return StoryStore(data_dir or get_data_dir())


def build_text_generator(offline: bool = False):
    if offline:
        return OfflineTextGenerator()
    client = OllamaTextGenerator(
        base_url=get_ollama_base_url(),
        model=get_ollama_model(),
        timeout=get_ollama_timeout(),
        temperature=get_ollama_temperature(),
        max_tokens=get_ollama_max_tokens(),
    )
    if not client.is_available():
        logger.warning(f"Ollama server not reachable at {client.base_url}; generation will fail")
    return client


def build_image_generator(offline: bool = False):
    """Image generator, or None when images are disabled.

    Offline mode always renders placeholder images.
    """
    if offline:
        return PlaceholderImageGenerator()
    if not get_images_enabled():
        return None
    return DiffusionImageGenerator(base_url=get_image_base_url(), timeout=get_image_timeout())


def build_video_generator(offline: bool = False):
    """Video generator, or None when transitions are disabled."""
    if not get_transitions_enabled() and not offline:
        return None
    if offline:
        return StubVideoGenerator()
    return PollingVideoGenerator(
        base_url=get_video_base_url(),
        poll_interval=get_video_poll_interval(),
        timeout=get_video_timeout(),
    )


def build_orchestrator(offline: bool = False, store: Optional[StoryStore] = None) -> StoryOrchestrator:
    """Wire a StoryOrchestrator from configuration.

    Args:
        offline: Use the template text generator and local media stand-ins
        store: Existing store (defaults to one under the configured data dir)
    """
    requester = ContentRequester(build_text_generator(offline), min_objects=get_min_objects())
    return StoryOrchestrator(
        store=store or build_store(),
        requester=requester,
        image_generator=build_image_generator(offline),
        video_generator=build_video_generator(offline),
        max_room_attempts=get_max_room_attempts(),
    )
