"""Room interpreter: what the player sees and may do for a given FlagSet.

Every function is pure; the FlagSet is passed in explicitly and a new one
is returned when an option changes it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from escapeforge.level.dsl import apply, evaluate
from escapeforge.level.model import FlagSet, InteractiveObject, Option, Room, TextVariant


class Outcome(Enum):
    """Result of selecting an option."""
    CONTINUE = "continue"
    WIN = "win"
    LOSE = "lose"
    ADVANCE = "advance"


ACTION_OUTCOMES = {
    "none": Outcome.CONTINUE,
    "finish": Outcome.WIN,
    "fail": Outcome.LOSE,
    "next": Outcome.ADVANCE,
}


@dataclass
class ObjectView:
    """Resolved state of one object, ready for rendering."""
    object: InteractiveObject
    text: Optional[TextVariant]
    options: List[Option]
    is_visible: bool


def is_visible(obj: InteractiveObject, flags: Mapping[str, bool]) -> bool:
    return evaluate(obj.visible_condition, flags)


def active_text(obj: InteractiveObject, flags: Mapping[str, bool]) -> Optional[TextVariant]:
    """First text variant whose condition holds, else the first variant.

    Only returns None for an object with no text at all, which the validator
    never lets through.
    """
    for variant in obj.text:
        if evaluate(variant.condition, flags):
            return variant
    return obj.text[0] if obj.text else None


def visible_options(obj: InteractiveObject, flags: Mapping[str, bool]) -> List[Option]:
    return [option for option in obj.options if evaluate(option.condition, flags)]


def select_option(option: Option, flags: Mapping[str, bool]) -> Tuple[FlagSet, Outcome]:
    """Apply an option's effects and map its action to an outcome.

    Args:
        option: The option the player picked
        flags: Current flags (not mutated)

    Returns:
        (new flags, outcome)
    """
    new_flags = apply(option.effects, flags)
    return new_flags, ACTION_OUTCOMES.get(option.action, Outcome.CONTINUE)


def resolve_object_view(obj: InteractiveObject, flags: Mapping[str, bool]) -> ObjectView:
    return ObjectView(
        object=obj,
        text=active_text(obj, flags),
        options=visible_options(obj, flags),
        is_visible=is_visible(obj, flags),
    )


def visible_objects(room: Room, flags: Mapping[str, bool]) -> List[InteractiveObject]:
    """Hotspots currently clickable, in document order."""
    return [obj for obj in room.objects if is_visible(obj, flags)]
