"""Story persistence: records and the JSON-file store."""

from .records import Story, RoomRecord, Asset, RoomView, StoryStatus, TERMINAL_STATUSES
from .store import StoryStore

__all__ = ['Story', 'RoomRecord', 'Asset', 'RoomView', 'StoryStatus', 'TERMINAL_STATUSES', 'StoryStore']
