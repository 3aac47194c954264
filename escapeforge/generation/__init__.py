"""Room generation: prompts, the content requester and the story orchestrator."""

from .prompts import SYSTEM_PROMPT, build_instruction, transition_prompt, story_goal, story_theme
from .requester import ContentRequester, RoomReply, GeneratedRoom, parse_reply
from .orchestrator import (
    StoryOrchestrator,
    STATUS_CREATED, STATUS_GENERATING, STATUS_ROOMS_COMPLETE,
    STATUS_GENERATING_TRANSITIONS, STATUS_COMPLETED, STATUS_FAILED,
)

__all__ = [
    'SYSTEM_PROMPT', 'build_instruction', 'transition_prompt', 'story_goal', 'story_theme',
    'ContentRequester', 'RoomReply', 'GeneratedRoom', 'parse_reply',
    'StoryOrchestrator',
    'STATUS_CREATED', 'STATUS_GENERATING', 'STATUS_ROOMS_COMPLETE',
    'STATUS_GENERATING_TRANSITIONS', 'STATUS_COMPLETED', 'STATUS_FAILED',
]
