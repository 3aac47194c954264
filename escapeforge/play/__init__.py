"""Play-time room interpreter and session state machine."""

from .interpreter import (
    Outcome, ObjectView, ACTION_OUTCOMES,
    is_visible, active_text, visible_options, select_option, resolve_object_view, visible_objects,
)
from .session import RoomSession, ChoiceResult, SessionState

__all__ = [
    'Outcome', 'ObjectView', 'ACTION_OUTCOMES',
    'is_visible', 'active_text', 'visible_options', 'select_option', 'resolve_object_view', 'visible_objects',
    'RoomSession', 'ChoiceResult', 'SessionState',
]
