"""Persisted entities: stories, room slots and uploaded assets."""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Literal, Optional

StoryStatus = Literal[
    "created", "generating", "rooms_complete", "generating_transitions", "completed", "failed"
]
TERMINAL_STATUSES = ("completed", "failed")


@dataclass
class Story:
    id: str
    prompt: str
    art_style: str
    goal: str = ""
    theme: str = ""
    total_rooms: int = 3
    status: StoryStatus = "created"
    room_summaries: List[str] = field(default_factory=list)
    error: Optional[str] = None
    created_at: float = 0.0
    updated_at: float = 0.0


@dataclass
class RoomRecord:
    """A room slot; ``level`` stays None until the room is generated."""
    id: str
    story_id: str
    room_number: int
    level: Optional[Dict[str, Any]] = None
    narrative_summary: Optional[str] = None
    transition_asset: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.level is not None


@dataclass
class Asset:
    name: str
    storage_id: str
    type: str
    mime_type: str


@dataclass
class RoomView:
    """Everything a player screen needs for one room."""
    room: RoomRecord
    story: Story
    next_room_id: Optional[str]
    is_last_room: bool


def from_record_dict(cls, data: Dict[str, Any]):
    """Build a record dataclass, ignoring keys it does not declare."""
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in names})
