"""Central configuration for escapeforge.

Tunable parameters for story generation (room count, retries), storage and
the external providers (Ollama text server, image server, video server).
Every value has a sensible default and can be overridden through EF_*
environment variables.
"""
from __future__ import annotations
import os


def _get_int_env(name: str, default: int, minval: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw)
        if minval is not None and v < minval:
            return default
        return v
    except ValueError:
        return default


def _get_float_env(name: str, default: float, minval: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = float(raw)
        if minval is not None and v < minval:
            return default
        return v
    except ValueError:
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val in {"1", "true", "yes", "on"}


# ---------------- Story generation ----------------
DEFAULT_TOTAL_ROOMS: int = 3

# Minimum interactive objects requested per room
DEFAULT_MIN_OBJECTS: int = 3


def get_total_rooms() -> int:
    """Rooms per story. Var: EF_TOTAL_ROOMS (default 3, at least 2)."""
    return _get_int_env("EF_TOTAL_ROOMS", DEFAULT_TOTAL_ROOMS, minval=2)


def get_min_objects() -> int:
    """Minimum objects asked of the generator. Var: EF_MIN_OBJECTS (default 3)."""
    return _get_int_env("EF_MIN_OBJECTS", DEFAULT_MIN_OBJECTS, minval=1)


def get_max_room_attempts() -> int:
    """Attempts per room on unparseable/invalid replies. Var: EF_ROOM_ATTEMPTS (default 1 = no retry)."""
    return _get_int_env("EF_ROOM_ATTEMPTS", 1, minval=1)


# ---------------- Storage & logging ----------------

def get_data_dir() -> str:
    """Directory of the JSON story store. Var: EF_DATA_DIR (default 'data')."""
    return os.getenv("EF_DATA_DIR", "data").strip()


def get_log_level() -> str:
    """Logging level name. Var: EF_LOG_LEVEL (default INFO)."""
    return os.getenv("EF_LOG_LEVEL", "INFO").strip().upper()


# ---------------- Ollama (text generation) ----------------

def get_ollama_base_url() -> str:
    """Base URL of the Ollama server. Var: EF_OLLAMA_BASE_URL (default http://localhost:11434)."""
    return os.getenv("EF_OLLAMA_BASE_URL", "http://localhost:11434").strip()


def get_ollama_model() -> str:
    """Ollama model name. Var: EF_OLLAMA_MODEL."""
    return os.getenv("EF_OLLAMA_MODEL", "llama3.1:8b").strip()


def get_ollama_timeout() -> float:
    """HTTP timeout in seconds. Var: EF_OLLAMA_TIMEOUT (default 120.0)."""
    return _get_float_env("EF_OLLAMA_TIMEOUT", 120.0, minval=1.0)


def get_ollama_temperature() -> float:
    """Sampling temperature. Var: EF_OLLAMA_TEMPERATURE (default 0.7)."""
    val = _get_float_env("EF_OLLAMA_TEMPERATURE", 0.7, minval=0.0)
    return max(0.0, min(2.0, val))


def get_ollama_max_tokens() -> int:
    """Max output tokens; a full Level is long. Var: EF_OLLAMA_MAX_TOKENS (default 4096)."""
    return _get_int_env("EF_OLLAMA_MAX_TOKENS", 4096, minval=256)


# ---------------- Image server ----------------

def get_images_enabled() -> bool:
    """Render room backgrounds and object images. Var: EF_IMAGES_ENABLED (default False)."""
    return _get_bool_env("EF_IMAGES_ENABLED", False)


def get_image_base_url() -> str:
    """Base URL of the diffusion server. Var: EF_IMAGE_BASE_URL (default http://127.0.0.1:8000)."""
    return os.getenv("EF_IMAGE_BASE_URL", "http://127.0.0.1:8000").strip()


def get_image_timeout() -> float:
    """Image request timeout in seconds. Var: EF_IMAGE_TIMEOUT (default 300.0)."""
    return _get_float_env("EF_IMAGE_TIMEOUT", 300.0, minval=1.0)


# ---------------- Video server (transitions) ----------------

def get_transitions_enabled() -> bool:
    """Generate transition clips between rooms. Var: EF_TRANSITIONS_ENABLED (default False)."""
    return _get_bool_env("EF_TRANSITIONS_ENABLED", False)


def get_video_base_url() -> str:
    """Base URL of the video job server. Var: EF_VIDEO_BASE_URL (default http://127.0.0.1:8010)."""
    return os.getenv("EF_VIDEO_BASE_URL", "http://127.0.0.1:8010").strip()


def get_video_poll_interval() -> float:
    """Seconds between job status polls. Var: EF_VIDEO_POLL_INTERVAL (default 10.0)."""
    return _get_float_env("EF_VIDEO_POLL_INTERVAL", 10.0, minval=0.1)


def get_video_timeout() -> float:
    """Give up on a video job after this many seconds. Var: EF_VIDEO_TIMEOUT (default 900.0)."""
    return _get_float_env("EF_VIDEO_TIMEOUT", 900.0, minval=1.0)


__all__ = [
    # Generation
    "DEFAULT_TOTAL_ROOMS", "DEFAULT_MIN_OBJECTS",
    "get_total_rooms", "get_min_objects", "get_max_room_attempts",
    # Storage / logging
    "get_data_dir", "get_log_level",
    # Ollama
    "get_ollama_base_url", "get_ollama_model", "get_ollama_timeout",
    "get_ollama_temperature", "get_ollama_max_tokens",
    # Images
    "get_images_enabled", "get_image_base_url", "get_image_timeout",
    # Video
    "get_transitions_enabled", "get_video_base_url", "get_video_poll_interval", "get_video_timeout",
]
