"""Shared fixtures for escapeforge tests."""

import copy
import json

import pytest

from escapeforge.storage import StoryStore


def make_level(level_id="study"):
    """Small valid three-object room: read the note, lift the rug, open the door."""
    return {
        "id": level_id,
        "initialState": {"noteRead": False, "rugLifted": False, "doorOpen": False},
        "room": {
            "backgroundImage": "",
            "objects": [
                {
                    "id": "note",
                    "name": "folded note",
                    "area": {"x": 10, "y": 60, "width": 10, "height": 10},
                    "text": [
                        {"content": "The note says: look under the rug.",
                         "condition": {"requiredTrue": ["noteRead"]}},
                        {"content": "A folded note."},
                    ],
                    "options": [
                        {"label": "Read", "action": "none", "effects": {"setTrue": ["noteRead"]}},
                    ],
                },
                {
                    "id": "rug",
                    "name": "dusty rug",
                    "area": {"x": 40, "y": 70, "width": 20, "height": 10},
                    "visibleCondition": {"requiredTrue": ["noteRead"], "requiredFalse": ["rugLifted"]},
                    "text": [{"content": "A dusty rug."}],
                    "options": [
                        {"label": "Lift it", "action": "none", "effects": {"setTrue": ["rugLifted"]}},
                    ],
                },
                {
                    "id": "door",
                    "name": "oak door",
                    "area": {"x": 75, "y": 20, "width": 15, "height": 50},
                    "text": [
                        {"content": "The door stands open.", "condition": {"requiredTrue": ["doorOpen"]}},
                        {"content": "A locked oak door."},
                    ],
                    "options": [
                        {"label": "Unlock", "action": "none", "effects": {"setTrue": ["doorOpen"]},
                         "condition": {"requiredTrue": ["rugLifted"], "requiredFalse": ["doorOpen"]}},
                        {"label": "Walk through", "action": "next",
                         "condition": {"requiredTrue": ["doorOpen"]}},
                        {"label": "Kick it", "action": "fail"},
                    ],
                },
            ],
        },
    }


def make_reply(level=None, summary="The player found a key under the rug.", visual="A dim study."):
    return json.dumps({
        "narrativeSummary": summary,
        "visualDescription": visual,
        "level": level if level is not None else make_level(),
    })


@pytest.fixture
def level_doc():
    return make_level()


@pytest.fixture
def level_copy(level_doc):
    """Independent copy for tests that mutate the document."""
    return copy.deepcopy(level_doc)


@pytest.fixture
def store(tmp_path):
    return StoryStore(tmp_path / "data")
