"""Finite State Machine for playing one room.

States: BROWSING, INTERACTING (an object is open), FINISHED (a win, lose or
advance outcome left the room). The session owns the FlagSet of one
playthrough; the interpreter functions stay pure.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from escapeforge.errors import InteractionError
from escapeforge.level.model import FlagSet, InteractiveObject, Level, Option
from .interpreter import (
    ObjectView,
    Outcome,
    is_visible,
    resolve_object_view,
    select_option,
    visible_objects,
    visible_options,
)

SessionState = Literal["BROWSING", "INTERACTING", "FINISHED"]


@dataclass
class ChoiceResult:
    """What happened after an option was selected."""
    option: Option
    outcome: Outcome
    flags: FlagSet
    object_hidden: bool = False  # the open object's visibleCondition no longer holds


@dataclass
class RoomSession:
    """Play state for a single room."""
    level: Level
    flags: FlagSet = field(default_factory=dict)
    state: SessionState = "BROWSING"
    open_object: Optional[InteractiveObject] = None
    outcome: Optional[Outcome] = None
    history: List[Dict[str, Any]] = field(default_factory=list)

    def __post_init__(self):
        if not self.flags:
            self.flags = dict(self.level.initial_state)

    def hotspots(self) -> List[InteractiveObject]:
        """Objects the player can click right now."""
        return visible_objects(self.level.room, self.flags)

    def click(self, object_id: str) -> ObjectView:
        """Open an object.

        Raises:
            InteractionError: if the room is finished, an object is already
                open, or the object is unknown or hidden
        """
        if self.state == "FINISHED":
            raise InteractionError("Room already finished")
        if self.state == "INTERACTING":
            raise InteractionError(f"Object '{self.open_object.id}' is already open")

        obj = self.level.room.get_object(object_id)
        if obj is None:
            raise InteractionError(f"Unknown object '{object_id}'")
        if not is_visible(obj, self.flags):
            raise InteractionError(f"Object '{object_id}' is not visible")

        self.state = "INTERACTING"
        self.open_object = obj
        return resolve_object_view(obj, self.flags)

    def view(self) -> Optional[ObjectView]:
        """Resolved view of the open object, if any."""
        if self.open_object is None:
            return None
        return resolve_object_view(self.open_object, self.flags)

    def choose(self, index: int) -> ChoiceResult:
        """Select one of the open object's visible options by index.

        Always returns to BROWSING (or FINISHED for win/lose/advance).
        """
        if self.state != "INTERACTING":
            raise InteractionError("No object is open")

        options = visible_options(self.open_object, self.flags)
        if not 0 <= index < len(options):
            raise InteractionError(f"Option {index} is not available")

        option = options[index]
        new_flags, outcome = select_option(option, self.flags)
        hidden = not is_visible(self.open_object, new_flags)

        self.history.append({
            "object_id": self.open_object.id,
            "label": option.label,
            "action": option.action,
            "outcome": outcome.value,
        })

        self.flags = new_flags
        self.open_object = None
        if outcome is Outcome.CONTINUE:
            self.state = "BROWSING"
        else:
            self.state = "FINISHED"
            self.outcome = outcome

        return ChoiceResult(option=option, outcome=outcome, flags=dict(new_flags), object_hidden=hidden)

    def close(self) -> None:
        """Close the open object without selecting anything."""
        if self.state == "INTERACTING":
            self.state = "BROWSING"
            self.open_object = None

    def reset(self) -> None:
        """Restart the room from its initial flags."""
        self.flags = dict(self.level.initial_state)
        self.state = "BROWSING"
        self.open_object = None
        self.outcome = None
        self.history = []
