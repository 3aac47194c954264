"""Template-based offline text generator.

Produces a small but complete three-object puzzle (clue -> key -> exit) for
whatever room the instruction asks for, so the whole pipeline can run
without a model server. Replies use the same JSON envelope as a real model.
"""

from __future__ import annotations
import json
import random
import re
from typing import Dict, List, Optional

_ROOM_RE = re.compile(r"Design Room (\d+) of (\d+)")
_PREMISE_RE = re.compile(r'\*\*Premise:\*\*\s*\n"(.*?)"', re.S)

THEMES: List[Dict[str, str]] = [
    {
        "place": "a dusty study",
        "clue": "letter", "clue_name": "crumpled letter on the desk",
        "holder": "clock", "holder_name": "grandfather clock frozen at midnight",
        "item": "brass key",
        "exit": "door", "exit_name": "heavy oak door",
    },
    {
        "place": "a flooded cellar",
        "clue": "chart", "clue_name": "water-stained tide chart",
        "holder": "crate", "holder_name": "barnacled wooden crate",
        "item": "iron crank",
        "exit": "hatch", "exit_name": "rusted ceiling hatch",
    },
    {
        "place": "an abandoned observatory",
        "clue": "logbook", "clue_name": "astronomer's logbook",
        "holder": "telescope", "holder_name": "cracked brass telescope",
        "item": "star lens",
        "exit": "dome", "exit_name": "sealed dome shutter",
    },
]


class OfflineTextGenerator:
    """Deterministic stand-in for a language model."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.calls: List[str] = []

    def generate(self, instruction: str, model_hint: Optional[str] = None) -> str:
        self.calls.append(instruction)
        match = _ROOM_RE.search(instruction)
        room_number, total_rooms = (int(match.group(1)), int(match.group(2))) if match else (1, 1)
        premise_match = _PREMISE_RE.search(instruction)
        premise = premise_match.group(1).strip() if premise_match else "an escape"

        rng = random.Random(f"{self.seed}:{room_number}")
        theme = THEMES[(room_number - 1) % len(THEMES)]
        return json.dumps(self._build_reply(theme, room_number, total_rooms, premise, rng))

    def _build_reply(self, theme: Dict[str, str], n: int, total: int, premise: str,
                     rng: random.Random) -> Dict[str, object]:
        clue_flag = f"room{n}_{theme['clue']}_read"
        item_flag = f"room{n}_{theme['item'].replace(' ', '_')}_taken"
        last = n == total

        exit_option = {
            "label": "Escape for good" if last else "Step through",
            "action": "finish" if last else "next",
            "condition": {"requiredTrue": [item_flag]},
        }

        level = {
            "id": f"room-{n}",
            "initialState": {clue_flag: False, item_flag: False},
            "room": {
                "backgroundImage": "",
                "objects": [
                    {
                        "id": theme["clue"],
                        "name": theme["clue_name"],
                        "area": {"x": rng.randint(5, 20), "y": 55, "width": 15, "height": 15},
                        "text": [
                            {"content": f"You already know the {theme['holder']} hides something.",
                             "condition": {"requiredTrue": [clue_flag]}},
                            {"content": f"A {theme['clue_name']} lies here."},
                        ],
                        "options": [
                            {"label": "Read it closely", "action": "none",
                             "effects": {"setTrue": [clue_flag]},
                             "condition": {"requiredFalse": [clue_flag]}},
                            {"label": "Put it down", "action": "none"},
                        ],
                    },
                    {
                        "id": theme["holder"],
                        "name": theme["holder_name"],
                        "area": {"x": rng.randint(40, 55), "y": 20, "width": 12, "height": 30},
                        "visibleCondition": {"requiredTrue": [clue_flag], "requiredFalse": [item_flag]},
                        "text": [{"content": f"Inside the {theme['holder']} glints a {theme['item']}."}],
                        "options": [
                            {"label": f"Take the {theme['item']}", "action": "none",
                             "effects": {"setTrue": [item_flag]}},
                        ],
                    },
                    {
                        "id": theme["exit"],
                        "name": theme["exit_name"],
                        "area": {"x": rng.randint(70, 80), "y": 30, "width": 15, "height": 40},
                        "text": [
                            {"content": f"The {theme['item']} fits perfectly.",
                             "condition": {"requiredTrue": [item_flag]}},
                            {"content": f"The {theme['exit_name']} will not budge."},
                        ],
                        "options": [
                            exit_option,
                            {"label": "Rattle it", "action": "none"},
                        ],
                    },
                ],
            },
        }

        return {
            "narrativeSummary": (
                f"Room {n}: in {theme['place']} the player read the {theme['clue']}, "
                f"found the {theme['item']} in the {theme['holder']} and opened the {theme['exit']}. "
                f"({premise[:80]})"
            ),
            "visualDescription": f"{theme['place'].capitalize()} with a {theme['clue_name']}, "
                                 f"a {theme['holder_name']} and a {theme['exit_name']}.",
            "level": level,
        }
