"""Tests for prompt building, reply parsing and room requests."""

import json

import pytest

from conftest import make_level, make_reply
from escapeforge.errors import (
    DanglingFlagError,
    ExternalCallFailure,
    MissingFieldError,
    UnparseableReplyError,
)
from escapeforge.generation import SYSTEM_PROMPT, ContentRequester, build_instruction, parse_reply
from escapeforge.generation.prompts import transition_prompt
from escapeforge.providers import ScriptedTextGenerator


class TestInstruction:
    """Test the per-room instruction template."""

    def test_first_room(self):
        text = build_instruction("Escape the lab", 1, 3, [], "comic")
        assert '**Premise:**\n"Escape the lab"' in text
        assert "Design Room 1 of 3" in text
        assert "FIRST room" in text
        assert "comic" in text
        assert "Previous Rooms" not in text

    def test_previous_summaries_are_labelled(self):
        text = build_instruction("Escape the lab", 3, 3, ["found a key", "opened a vent"], "drawing")
        assert "Room 1: found a key" in text
        assert "Room 2: opened a vent" in text
        assert "FINAL room" in text
        assert '"finish"' in text

    def test_middle_room_hint(self):
        text = build_instruction("Escape the lab", 2, 4, ["found a key"], "comic")
        assert "MIDDLE room" in text

    def test_contract_fields(self):
        text = build_instruction("p", 1, 2, [], "photorealistic", min_objects=4)
        for key in ("narrativeSummary", "visualDescription", "level", "at least 4"):
            assert key in text

    def test_deterministic(self):
        args = ("Escape the lab", 2, 3, ["a"], "comic")
        assert build_instruction(*args) == build_instruction(*args)

    def test_transition_prompt(self):
        text = transition_prompt("comic", "Complete the challenge: x", 1, 2, "a study", "a cellar")
        assert text.startswith("Create a comic cinematic video transitioning from room 1 to room 2")
        assert "Highlight continuity and mood evolution." in text


class TestParseReply:
    """Test reply parsing."""

    def test_plain_json(self):
        reply = parse_reply(make_reply())
        assert reply.narrative_summary == "The player found a key under the rug."
        assert reply.visual_description == "A dim study."
        assert reply.level_candidate["id"] == "study"
        assert reply.object_names == {"note": "folded note", "rug": "dusty rug", "door": "oak door"}

    def test_fenced_json(self):
        reply = parse_reply("```json\n" + make_reply() + "\n```")
        assert reply.level_candidate["id"] == "study"

    def test_json_surrounded_by_text(self):
        reply = parse_reply("Here is your room:\n" + make_reply() + "\nEnjoy!")
        assert reply.level_candidate["id"] == "study"

    def test_visual_description_defaults_to_summary(self):
        raw = json.dumps({"narrativeSummary": "summary", "level": {}})
        assert parse_reply(raw).visual_description == "summary"

    @pytest.mark.parametrize("raw", [
        "no json here",
        "[1, 2, 3]",
        "{broken",
        json.dumps({"level": {}}),
        json.dumps({"narrativeSummary": "  ", "level": {}}),
        json.dumps({"narrativeSummary": "ok"}),
    ])
    def test_unparseable(self, raw):
        with pytest.raises(UnparseableReplyError):
            parse_reply(raw)

    @pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_numbers_are_unparseable(self, constant):
        raw = make_reply().replace('"x": 10', f'"x": {constant}', 1)
        assert constant in raw
        with pytest.raises(UnparseableReplyError, match="Non-finite"):
            parse_reply(raw)


class TestContentRequester:
    """Test the requester against scripted generators."""

    def test_generate_room(self):
        generator = ScriptedTextGenerator([make_reply()])
        requester = ContentRequester(generator)
        room = requester.generate_room("Escape the lab", 1, 3, [], "comic")

        assert room.level.id == "study"
        assert room.narrative_summary.startswith("The player")
        assert room.object_names["rug"] == "dusty rug"
        assert len(generator.calls) == 1
        assert generator.calls[0].startswith(SYSTEM_PROMPT)
        assert "Design Room 1 of 3" in generator.calls[0]

    def test_provider_error_is_wrapped(self):
        requester = ContentRequester(ScriptedTextGenerator([RuntimeError("boom")]))
        with pytest.raises(ExternalCallFailure):
            requester.request_room("hello")

    def test_external_failure_passes_through(self):
        requester = ContentRequester(ScriptedTextGenerator([ExternalCallFailure("down")]))
        with pytest.raises(ExternalCallFailure, match="down"):
            requester.request_room("hello")

    def test_structural_error_propagates(self):
        level = make_level()
        del level["room"]["objects"][0]["text"]
        requester = ContentRequester(ScriptedTextGenerator([make_reply(level)]))
        with pytest.raises(MissingFieldError):
            requester.generate_room("p", 1, 3, [], "comic")

    def test_semantic_error_propagates(self):
        level = make_level()
        level["initialState"] = {}
        requester = ContentRequester(ScriptedTextGenerator([make_reply(level)]))
        with pytest.raises(DanglingFlagError):
            requester.generate_room("p", 1, 3, [], "comic")

    def test_no_retry_inside_requester(self):
        generator = ScriptedTextGenerator(["garbage", make_reply()])
        requester = ContentRequester(generator)
        with pytest.raises(UnparseableReplyError):
            requester.generate_room("p", 1, 3, [], "comic")
        assert len(generator.calls) == 1
