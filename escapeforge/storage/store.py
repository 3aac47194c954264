"""JSON-file story store.

Stories, room slots and asset metadata are stored as JSON documents under a
data directory; uploaded bytes live in a blob directory. Blob uploads follow
a two-step contract: obtain an upload handle, upload bytes to it (which
yields a storage id), then register asset metadata under a name.
"""
from __future__ import annotations
import json
import logging
import os
import time
import uuid
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from escapeforge.errors import StorageError
from .records import Asset, RoomRecord, RoomView, Story, from_record_dict

logger = logging.getLogger(__name__)


class StoryStore:
    """Key-indexed store for Story, RoomRecord and Asset entities."""

    def __init__(self, base_dir):
        self.base_dir = Path(base_dir)
        self.stories_dir = self.base_dir / "stories"
        self.rooms_dir = self.base_dir / "rooms"
        self.blobs_dir = self.base_dir / "blobs"
        self.assets_file = self.base_dir / "assets.json"
        self._pending_uploads: Set[str] = set()
        self.ensure_dirs()

    def ensure_dirs(self):
        """Ensure the store directories exist."""
        try:
            for directory in (self.stories_dir, self.rooms_dir, self.blobs_dir):
                directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create store at {self.base_dir}: {e}") from e

    # ---------------- low level ----------------

    def _write_json(self, path: Path, data: Any) -> None:
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, allow_nan=False)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {path.name}: {e}") from e

    def _read_json(self, path: Path) -> Optional[Any]:
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {path.name}: {e}") from e

    @staticmethod
    def _new_id(prefix: str) -> str:
        return f"{prefix}_{uuid.uuid4().hex[:12]}"

    # ---------------- stories ----------------

    def create_story(self, prompt: str, art_style: str, goal: str = "", total_rooms: int = 3,
                     theme: str = "") -> Story:
        now = time.time()
        story = Story(
            id=self._new_id("story"),
            prompt=prompt,
            art_style=art_style,
            goal=goal,
            theme=theme,
            total_rooms=total_rooms,
            created_at=now,
            updated_at=now,
        )
        self._write_json(self.stories_dir / f"{story.id}.json", asdict(story))
        return story

    def get_story(self, story_id: str) -> Optional[Story]:
        data = self._read_json(self.stories_dir / f"{story_id}.json")
        return from_record_dict(Story, data) if data is not None else None

    def patch_story(self, story_id: str, **changes) -> Story:
        """Update selected fields of a story.

        Raises:
            StorageError: unknown story or unknown field
        """
        story = self.get_story(story_id)
        if story is None:
            raise StorageError(f"Story not found: {story_id}")
        _apply_changes(story, changes)
        story.updated_at = time.time()
        self._write_json(self.stories_dir / f"{story.id}.json", asdict(story))
        return story

    def list_stories(self) -> List[Story]:
        """All stories, newest first."""
        stories = []
        for path in self.stories_dir.glob("*.json"):
            story = self.get_story(path.stem)
            if story is not None:
                stories.append(story)
        stories.sort(key=lambda s: s.created_at, reverse=True)
        return stories

    # ---------------- rooms ----------------

    def create_room(self, story_id: str, room_number: int, level: Optional[Dict[str, Any]] = None) -> RoomRecord:
        room = RoomRecord(id=self._new_id("room"), story_id=story_id, room_number=room_number, level=level)
        self._write_json(self.rooms_dir / f"{room.id}.json", asdict(room))
        return room

    def get_room(self, room_id: str) -> Optional[RoomRecord]:
        data = self._read_json(self.rooms_dir / f"{room_id}.json")
        return from_record_dict(RoomRecord, data) if data is not None else None

    def patch_room(self, room_id: str, **changes) -> RoomRecord:
        room = self.get_room(room_id)
        if room is None:
            raise StorageError(f"Room not found: {room_id}")
        _apply_changes(room, changes)
        self._write_json(self.rooms_dir / f"{room.id}.json", asdict(room))
        return room

    def rooms_for_story(self, story_id: str) -> List[RoomRecord]:
        """All room slots of a story ordered by room number."""
        rooms = []
        for path in self.rooms_dir.glob("*.json"):
            room = self.get_room(path.stem)
            if room is not None and room.story_id == story_id:
                rooms.append(room)
        rooms.sort(key=lambda r: r.room_number)
        return rooms

    def first_room_id(self, story_id: str) -> Optional[str]:
        rooms = self.rooms_for_story(story_id)
        return rooms[0].id if rooms else None

    def get_room_view(self, room_id: str) -> Optional[RoomView]:
        """Room plus parent story, the next room's id and a last-room flag."""
        room = self.get_room(room_id)
        if room is None:
            return None
        story = self.get_story(room.story_id)
        if story is None:
            return None

        rooms = self.rooms_for_story(story.id)
        index = next(i for i, r in enumerate(rooms) if r.id == room.id)
        next_room_id = rooms[index + 1].id if index < len(rooms) - 1 else None

        return RoomView(
            room=room,
            story=story,
            next_room_id=next_room_id,
            is_last_room=room.room_number == story.total_rooms,
        )

    # ---------------- blobs & assets ----------------

    def generate_upload_url(self) -> str:
        """Short-lived handle for one upload."""
        handle = self._new_id("upload")
        self._pending_uploads.add(handle)
        return handle

    def upload(self, handle: str, data: bytes, mime_type: str) -> str:
        """Store bytes under an upload handle and return the storage id."""
        if handle not in self._pending_uploads:
            raise StorageError(f"Unknown or used upload handle: {handle}")
        if not isinstance(data, (bytes, bytearray)):
            raise StorageError(f"Blob data must be bytes, got {type(data).__name__}")
        self._pending_uploads.discard(handle)

        storage_id = self._new_id("blob")
        try:
            (self.blobs_dir / storage_id).write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to store blob: {e}") from e
        logger.debug(f"Stored {len(data)} bytes ({mime_type}) as {storage_id}")
        return storage_id

    def _load_assets(self) -> Dict[str, Dict[str, Any]]:
        return self._read_json(self.assets_file) or {}

    def save_asset(self, name: str, storage_id: str, type: str, mime_type: str) -> Asset:
        """Register asset metadata; an existing asset with the same name is replaced."""
        if not (self.blobs_dir / storage_id).exists():
            raise StorageError(f"Unknown storage id: {storage_id}")
        assets = self._load_assets()
        asset = Asset(name=name, storage_id=storage_id, type=type, mime_type=mime_type)
        assets[name] = asdict(asset)
        self._write_json(self.assets_file, assets)
        return asset

    def get_asset(self, name: str) -> Optional[Asset]:
        data = self._load_assets().get(name)
        return from_record_dict(Asset, data) if data is not None else None

    def get_asset_url(self, name: str) -> Optional[str]:
        asset = self.get_asset(name)
        if asset is None:
            return None
        return (self.blobs_dir / asset.storage_id).resolve().as_uri()

    def read_asset(self, name: str) -> bytes:
        asset = self.get_asset(name)
        if asset is None:
            raise StorageError(f"Asset not found: {name}")
        try:
            return (self.blobs_dir / asset.storage_id).read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read asset {name}: {e}") from e

    def delete_asset(self, name: str) -> bool:
        assets = self._load_assets()
        data = assets.pop(name, None)
        if data is None:
            return False
        blob = self.blobs_dir / data["storage_id"]
        if blob.exists():
            blob.unlink()
        self._write_json(self.assets_file, assets)
        return True

    def store_bytes(self, name: str, data: bytes, type: str, mime_type: str) -> str:
        """Run the full upload contract and return the asset URL."""
        handle = self.generate_upload_url()
        storage_id = self.upload(handle, data, mime_type)
        self.save_asset(name, storage_id, type, mime_type)
        return self.get_asset_url(name)


def _apply_changes(record, changes: Dict[str, Any]) -> None:
    names = {f.name for f in fields(record)}
    unknown = set(changes) - names - {"id"}
    if unknown or "id" in changes:
        raise StorageError(f"Cannot patch fields: {', '.join(sorted(unknown | ({'id'} & set(changes))))}")
    for key, value in changes.items():
        setattr(record, key, value)
