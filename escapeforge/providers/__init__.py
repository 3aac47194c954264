"""External generator clients (text, image, video) and their offline stand-ins."""

from .text import OllamaTextGenerator, ScriptedTextGenerator
from .images import DiffusionImageGenerator, PlaceholderImageGenerator, dimensions_for, ASPECT_RATIOS, SIZE_HINTS
from .video import PollingVideoGenerator, StubVideoGenerator
from .offline import OfflineTextGenerator

__all__ = [
    'OllamaTextGenerator', 'ScriptedTextGenerator', 'OfflineTextGenerator',
    'DiffusionImageGenerator', 'PlaceholderImageGenerator', 'dimensions_for', 'ASPECT_RATIOS', 'SIZE_HINTS',
    'PollingVideoGenerator', 'StubVideoGenerator',
]
