"""Story sequence orchestrator.

Drives one story from premise to playable rooms:

    created -> generating -> rooms_complete -> generating_transitions -> completed
                    \\______________________________________________/
                                          failed

Rooms are generated strictly in order, each one seeing the narrative
summaries of the rooms before it. A room failure stops the sequence and
marks the story failed; rooms already persisted are kept. Transition clips
are best effort: a failed pair is logged and skipped.
"""
from __future__ import annotations
import logging
from typing import Dict, List, Optional

from escapeforge.errors import (
    EscapeForgeError,
    ExternalCallFailure,
    StorageError,
    UnparseableReplyError,
    ValidationError,
)
from escapeforge.level import ART_STYLES, Level
from escapeforge.storage import RoomRecord, Story
from .prompts import (
    background_prompt,
    object_prompt,
    story_context,
    story_goal,
    story_theme,
    transition_prompt,
)
from .requester import GeneratedRoom

logger = logging.getLogger(__name__)

STATUS_CREATED = "created"
STATUS_GENERATING = "generating"
STATUS_ROOMS_COMPLETE = "rooms_complete"
STATUS_GENERATING_TRANSITIONS = "generating_transitions"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

BACKGROUND_ASPECT_RATIO = "16:9"
BACKGROUND_SIZE = "2K"
OBJECT_ASPECT_RATIO = "1:1"
OBJECT_SIZE = "1K"
TRANSITION_ASPECT_RATIO = "16:9"

# Errors that abort room generation
ROOM_FAILURES = (UnparseableReplyError, ValidationError, ExternalCallFailure)
# Errors worth another attempt at the same room
RETRYABLE = (UnparseableReplyError, ValidationError)


def background_asset_name(story_id: str, room_number: int) -> str:
    return f"story-{story_id}-room-{room_number}-background"


def object_asset_name(story_id: str, room_number: int, object_id: str) -> str:
    return f"story-{story_id}-room-{room_number}-object-{object_id}"


def transition_asset_name(story_id: str, from_room: int, to_room: int) -> str:
    return f"story-{story_id}-transition-{from_room}-{to_room}"


def _call_external(what: str, fn, *args, **kwargs):
    """Call an injected generator, normalizing foreign exceptions."""
    try:
        return fn(*args, **kwargs)
    except EscapeForgeError:
        raise
    except Exception as e:
        raise ExternalCallFailure(f"{what} failed: {e}") from e


def _call_for_bytes(what: str, fn, *args, **kwargs) -> bytes:
    data = _call_external(what, fn, *args, **kwargs)
    if not isinstance(data, (bytes, bytearray)):
        raise ExternalCallFailure(f"{what} returned {type(data).__name__}, expected bytes")
    return bytes(data)


class StoryOrchestrator:
    """Generates the rooms (and optional media and transitions) of a story.

    Args:
        store: StoryStore used for stories, rooms and assets
        requester: ContentRequester producing validated rooms
        image_generator: Optional image generator; None keeps rooms text-only
        video_generator: Optional video generator; None skips transitions
        max_room_attempts: Attempts per room on parse/validation errors
    """

    def __init__(self, store, requester, image_generator=None, video_generator=None,
                 max_room_attempts: int = 1):
        self.store = store
        self.requester = requester
        self.image_generator = image_generator
        self.video_generator = video_generator
        self.max_room_attempts = max(1, int(max_room_attempts))

    # ---------------- public API ----------------

    def create_story(self, premise: str, style: str = "comic", total_rooms: int = 3) -> Story:
        """Create a story and its empty room slots.

        Raises:
            ValueError: empty premise, unknown style or fewer than one room
        """
        if not premise or not premise.strip():
            raise ValueError("Premise must not be empty")
        if style not in ART_STYLES:
            raise ValueError(f"Unknown art style '{style}' (expected one of {', '.join(ART_STYLES)})")
        if total_rooms < 1:
            raise ValueError("A story needs at least one room")

        story = self.store.create_story(
            prompt=premise.strip(),
            art_style=style,
            goal=story_goal(premise),
            theme=story_theme(premise),
            total_rooms=total_rooms,
        )
        for room_number in range(1, total_rooms + 1):
            self.store.create_room(story.id, room_number)

        logger.info(f"Created story {story.id} with {total_rooms} rooms ({style})")
        return story

    def run(self, story_id: str, reference_image: Optional[bytes] = None) -> Story:
        """Generate every room of a created story, then its transitions.

        Args:
            story_id: Story created by ``create_story``
            reference_image: Optional image guiding the first background

        Returns:
            The completed Story

        Raises:
            UnparseableReplyError, StructuralValidationError,
            SemanticValidationError, ExternalCallFailure: a room could not be
            generated. Any error raised after generation starts leaves the
            story in the failed state before propagating.
        """
        story = self.store.get_story(story_id)
        if story is None:
            raise StorageError(f"Story not found: {story_id}")

        rooms = self.store.rooms_for_story(story_id)
        context = story_context(story.goal, story.prompt)
        summaries: List[str] = []
        visuals: Dict[int, str] = {}

        self.store.patch_story(story_id, status=STATUS_GENERATING, error=None, room_summaries=[])

        try:
            for room in rooms:
                try:
                    generated = self._generate_room(context, room.room_number, story.total_rooms,
                                                    summaries, story.art_style)
                    level = self._render_media(
                        story, room.room_number, generated,
                        reference_image if room.room_number == 1 else None,
                    )
                    self.store.patch_room(room.id, level=level.to_dict(),
                                          narrative_summary=generated.narrative_summary)
                except ROOM_FAILURES as e:
                    logger.error(f"Story {story_id}: room {room.room_number} failed: {e}")
                    raise

                summaries.append(generated.narrative_summary)
                visuals[room.room_number] = generated.visual_description
                self.store.patch_story(story_id, room_summaries=list(summaries))
                logger.info(f"Story {story_id}: room {room.room_number}/{story.total_rooms} saved")

            self.store.patch_story(story_id, status=STATUS_ROOMS_COMPLETE)

            if self.video_generator is not None and len(rooms) > 1:
                self.store.patch_story(story_id, status=STATUS_GENERATING_TRANSITIONS)
                for current, following in zip(rooms, rooms[1:]):
                    self._generate_transition(story, current, following, visuals)

            logger.info(f"Story {story_id} completed")
            return self.store.patch_story(story_id, status=STATUS_COMPLETED)
        except Exception as e:
            self._mark_failed(story_id, e)
            raise

    def generate_story(self, premise: str, style: str = "comic", total_rooms: int = 3,
                       reference_image: Optional[bytes] = None) -> Story:
        """Create and run a story in one call."""
        story = self.create_story(premise, style, total_rooms)
        return self.run(story.id, reference_image=reference_image)

    def _mark_failed(self, story_id: str, error: Exception) -> None:
        """Move a story to the failed state, keeping its persisted rooms."""
        if not isinstance(error, ROOM_FAILURES):
            logger.exception(f"Story {story_id}: generation aborted by {type(error).__name__}")
        try:
            self.store.patch_story(story_id, status=STATUS_FAILED, error=str(error) or type(error).__name__)
        except StorageError as e:
            logger.error(f"Story {story_id}: could not record failure: {e}")

    # ---------------- rooms ----------------

    def _generate_room(self, context: str, room_number: int, total_rooms: int,
                       summaries: List[str], style: str) -> GeneratedRoom:
        for attempt in range(1, self.max_room_attempts + 1):
            try:
                return self.requester.generate_room(context, room_number, total_rooms,
                                                    list(summaries), style)
            except RETRYABLE as e:
                if attempt >= self.max_room_attempts:
                    raise
                logger.warning(
                    f"Room {room_number} attempt {attempt}/{self.max_room_attempts} rejected: {e}"
                )

    def _render_media(self, story: Story, room_number: int, generated: GeneratedRoom,
                      reference_image: Optional[bytes]) -> Level:
        """Generate and upload background and object images into the Level."""
        level = generated.level
        if self.image_generator is None:
            return level

        mime_type = getattr(self.image_generator, "mime_type", "image/png")
        visual = generated.visual_description

        data = _call_for_bytes(
            "Background image", self.image_generator.generate,
            background_prompt(visual, story.art_style),
            aspect_ratio=BACKGROUND_ASPECT_RATIO, size_hint=BACKGROUND_SIZE,
            reference_image=reference_image,
        )
        level.room.background_image = self.store.store_bytes(
            background_asset_name(story.id, room_number), data, "image", mime_type
        )

        for obj in level.room.objects:
            name = generated.object_names.get(obj.id, obj.id)
            data = _call_for_bytes(
                f"Image for object '{obj.id}'", self.image_generator.generate,
                object_prompt(name, visual, story.art_style),
                aspect_ratio=OBJECT_ASPECT_RATIO, size_hint=OBJECT_SIZE,
            )
            obj.image = self.store.store_bytes(
                object_asset_name(story.id, room_number, obj.id), data, "image", mime_type
            )

        logger.debug(f"Rendered {len(level.room.objects) + 1} images for room {room_number}")
        return level

    # ---------------- transitions ----------------

    def _generate_transition(self, story: Story, current: RoomRecord, following: RoomRecord,
                             visuals: Dict[int, str]) -> None:
        pair = f"{current.room_number}->{following.room_number}"
        try:
            first_frame = self.store.read_asset(background_asset_name(story.id, current.room_number))
            last_frame = self.store.read_asset(background_asset_name(story.id, following.room_number))
            prompt = transition_prompt(
                story.art_style, story.goal, current.room_number, following.room_number,
                visuals.get(current.room_number, ""), visuals.get(following.room_number, ""),
            )
            clip = _call_for_bytes(
                f"Transition {pair}", self.video_generator.generate,
                prompt, first_frame, last_frame, TRANSITION_ASPECT_RATIO,
            )
            url = self.store.store_bytes(
                transition_asset_name(story.id, current.room_number, following.room_number),
                clip, "video", getattr(self.video_generator, "mime_type", "video/mp4"),
            )
            self.store.patch_room(current.id, transition_asset=url)
            logger.info(f"Story {story.id}: transition {pair} saved")
        except ExternalCallFailure as e:
            logger.warning(f"Story {story.id}: transition {pair} skipped: {e}")
