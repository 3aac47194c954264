"""Prompt templates for room, image and transition generation."""
from typing import Sequence

SYSTEM_PROMPT = """You are an expert escape room architect building a point-and-click puzzle for a text and image engine.
Your output must be playable without human tweaks and must already satisfy the Level contract below.

--- Engine ---
- The player sees a static background with clickable hotspots (`objects`).
- Clicking a hotspot shows the resolved text variant and the option buttons.
- Options change shared boolean flags via `effects` and may trigger an `action`: "finish", "fail", "next" or "none".
- Visibility of hotspots, text variants and options is controlled by Conditions (requiredTrue / requiredFalse flag lists).
- Every flag mentioned anywhere MUST be declared in `initialState`.

--- Rules ---
1) Build a puzzle chain of at least three dependent steps (find item -> unlock device -> open exit).
2) `area` values are percentages (0-100). Floor props have y > 60, wall props y < 50. Avoid overlapping hitboxes.
3) Each object needs a unique `id` and a short `name` used for its picture.
4) After an option changes the state, add a text variant describing the new state.
5) Never put the same flag in both setTrue and setFalse of one effect.
6) Leave `backgroundImage` as an empty string "".
7) Output JSON ONLY. No extra text.

--- Level contract ---
Condition   = {"requiredTrue"?: [flag], "requiredFalse"?: [flag]}
Effect      = {"setTrue"?: [flag], "setFalse"?: [flag]}
TextVariant = {"content": str, "condition"?: Condition}
Option      = {"label": str, "action": "next"|"fail"|"finish"|"none", "effects"?: Effect, "condition"?: Condition}
Object      = {"id": str, "name": str, "area": {"x","y","width","height"}, "text": [TextVariant],
               "options": [Option], "visibleCondition"?: Condition}
Level       = {"id": str, "initialState": {flag: bool}, "room": {"backgroundImage": "", "objects": [Object]}}
"""

FIRST_ROOM_HINT = (
    "This is the FIRST room. Frame the premise, establish the stakes and plant the first clue "
    "without making the puzzle trivial."
)
MIDDLE_ROOM_HINT = (
    "This is a MIDDLE room. Reference at least one event from an earlier room and foreshadow "
    "something the player will need later."
)
LAST_ROOM_HINT = (
    "This is the FINAL room. Deliver the climax, call back past discoveries and gate the escape "
    "behind the hardest step. Exactly one option may use `action: \"finish\"`; no other option "
    "may finish the game."
)


def story_goal(premise: str) -> str:
    return f"Complete the challenge: {premise.strip()}"


def story_theme(premise: str) -> str:
    return "escape" if "escape" in premise.lower() else "adventure"


def story_context(goal: str, premise: str) -> str:
    return f"{goal}. {premise.strip()}"


def role_hint(room_number: int, total_rooms: int) -> str:
    if room_number == 1:
        return FIRST_ROOM_HINT
    if room_number == total_rooms:
        return LAST_ROOM_HINT
    return MIDDLE_ROOM_HINT


def build_instruction(premise: str, room_number: int, total_rooms: int,
                      previous_summaries: Sequence[str], style: str,
                      min_objects: int = 3) -> str:
    """Build the per-room instruction.

    The output depends only on the arguments, so the same inputs always
    produce the same text.

    Args:
        premise: Story context shared by every room
        room_number: 1-based index of the room to design
        total_rooms: Number of rooms in the story
        previous_summaries: Narrative summaries of rooms 1..room_number-1
        style: Art style name
        min_objects: Minimum number of interactive objects

    Returns:
        Instruction text (without the system preamble)
    """
    parts = [f'**Premise:**\n"{premise.strip()}"\n']

    if previous_summaries:
        parts.append("**Previous Rooms (for continuity):**")
        for index, summary in enumerate(previous_summaries, start=1):
            parts.append(f"Room {index}: {summary}")
        parts.append(
            f"\nUse these events to justify callbacks, clues or consequences in Room {room_number}.\n"
        )

    parts.append(
        f"**Task:**\nDesign Room {room_number} of {total_rooms}. "
        "The puzzle chain must clearly advance the overall escape.\n"
    )
    parts.append(role_hint(room_number, total_rooms) + "\n")
    parts.append(
        f"**Visual Direction:** The scene must embody a {style} aesthetic. "
        "Describe lighting, palette and props accordingly.\n"
    )
    parts.append(
        "**Response Contract:**\nReturn a JSON object with:\n"
        "- `narrativeSummary`: one or two sentences on what happens in this room (non-empty).\n"
        "- `visualDescription`: scene-setting prose for the background art.\n"
        f"- `level`: a complete Level with at least {min_objects} interactive objects "
        "and a populated initialState.\n"
    )
    return "\n".join(parts)


def background_prompt(visual_description: str, style: str) -> str:
    return (
        f"Create a detailed, atmospheric {style} image for an escape room game: {visual_description}. "
        "Immersive, high detail, suited to a point-and-click adventure."
    )


def object_prompt(object_name: str, visual_description: str, style: str) -> str:
    return (
        f"A detailed {style} image of {object_name} in the context of: {visual_description}. "
        "Clear and recognizable, suitable for an escape room game interface."
    )


def transition_prompt(style: str, goal: str, from_room: int, to_room: int,
                      from_summary: str, to_summary: str) -> str:
    return (
        f"Create a {style} cinematic video transitioning from room {from_room} to room {to_room} "
        f"for the story goal: {goal}. "
        f"Room {from_room}: {from_summary} "
        f"Room {to_room}: {to_summary} "
        "Highlight continuity and mood evolution."
    )
