"""Room content requester.

Builds the per-room instruction, calls the injected text generator once and
turns the raw reply into a validated Level.
"""
from __future__ import annotations
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from escapeforge.errors import EscapeForgeError, ExternalCallFailure, UnparseableReplyError
from escapeforge.level import Level, validate_level
from .prompts import SYSTEM_PROMPT, build_instruction

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.S | re.I)


@dataclass
class RoomReply:
    narrative_summary: str
    level_candidate: Any
    visual_description: str
    object_names: Dict[str, str] = field(default_factory=dict)


@dataclass
class GeneratedRoom:
    level: Level
    narrative_summary: str
    visual_description: str
    object_names: Dict[str, str] = field(default_factory=dict)


def _strip_fences(raw: str) -> str:
    text = raw.strip()
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text


def _collect_object_names(level_candidate: Any) -> Dict[str, str]:
    """Map object id -> display name, tolerating any malformed shape."""
    names: Dict[str, str] = {}
    room = level_candidate.get("room") if isinstance(level_candidate, dict) else None
    objects = room.get("objects") if isinstance(room, dict) else None
    if not isinstance(objects, list):
        return names
    for obj in objects:
        if isinstance(obj, dict) and isinstance(obj.get("id"), str) and isinstance(obj.get("name"), str):
            names[obj["id"]] = obj["name"]
    return names


def parse_reply(raw: str) -> RoomReply:
    """Parse a model reply into its parts.

    Raises:
        UnparseableReplyError: not a JSON object, or summary/level missing
    """
    def reject_constant(name):
        # NaN, Infinity and -Infinity are not JSON
        raise UnparseableReplyError(f"Non-finite number {name} in reply", raw=raw)

    text = _strip_fences(raw or "")
    try:
        data = json.loads(text, parse_constant=reject_constant)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise UnparseableReplyError("No JSON object found in reply", raw=raw)
        try:
            data = json.loads(text[start:end + 1], parse_constant=reject_constant)
        except json.JSONDecodeError as e:
            raise UnparseableReplyError(f"Invalid JSON in reply: {e}", raw=raw) from e

    if not isinstance(data, dict):
        raise UnparseableReplyError("Reply is not a JSON object", raw=raw)

    summary = data.get("narrativeSummary")
    if not isinstance(summary, str) or not summary.strip():
        raise UnparseableReplyError("Reply has no narrativeSummary", raw=raw)
    if "level" not in data:
        raise UnparseableReplyError("Reply has no level", raw=raw)

    visual = data.get("visualDescription")
    if not isinstance(visual, str) or not visual.strip():
        visual = summary

    level_candidate = data["level"]
    return RoomReply(
        narrative_summary=summary.strip(),
        level_candidate=level_candidate,
        visual_description=visual.strip(),
        object_names=_collect_object_names(level_candidate),
    )


class ContentRequester:
    """Requests one room at a time from a text generator.

    The generator is any object with ``generate(instruction, model_hint=None) -> str``.
    """

    def __init__(self, text_generator, model_hint: Optional[str] = None, min_objects: int = 3):
        self.text_generator = text_generator
        self.model_hint = model_hint
        self.min_objects = min_objects

    def build_instruction(self, premise: str, room_number: int, total_rooms: int,
                          previous_summaries: Sequence[str], style: str) -> str:
        return build_instruction(premise, room_number, total_rooms, previous_summaries,
                                 style, min_objects=self.min_objects)

    def request_room(self, instruction: str) -> str:
        """Send one instruction (with the system preamble); no retries.

        Raises:
            ExternalCallFailure: the generator failed
        """
        prompt = f"{SYSTEM_PROMPT}\n\n{instruction}"
        try:
            return self.text_generator.generate(prompt, model_hint=self.model_hint)
        except EscapeForgeError:
            raise
        except Exception as e:
            raise ExternalCallFailure(f"Text generator failed: {e}") from e

    def parse_reply(self, raw: str) -> RoomReply:
        return parse_reply(raw)

    def generate_room(self, premise: str, room_number: int, total_rooms: int,
                      previous_summaries: Sequence[str], style: str) -> GeneratedRoom:
        """Build, request, parse and validate one room.

        Raises:
            ExternalCallFailure, UnparseableReplyError,
            StructuralValidationError, SemanticValidationError
        """
        instruction = self.build_instruction(premise, room_number, total_rooms,
                                             previous_summaries, style)
        logger.info(f"Requesting room {room_number}/{total_rooms}")
        raw = self.request_room(instruction)
        reply = self.parse_reply(raw)
        level = validate_level(reply.level_candidate)

        if len(level.room.objects) < self.min_objects:
            logger.warning(
                f"Room {room_number} has {len(level.room.objects)} objects, "
                f"fewer than the {self.min_objects} requested"
            )

        return GeneratedRoom(
            level=level,
            narrative_summary=reply.narrative_summary,
            visual_description=reply.visual_description,
            object_names=reply.object_names,
        )
