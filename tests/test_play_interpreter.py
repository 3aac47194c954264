"""Test the room interpreter functions."""

import itertools

from escapeforge.level import Level, apply, validate_level
from escapeforge.level.model import Area, Condition, InteractiveObject, Option, Room, TextVariant
from escapeforge.play import (
    Outcome,
    active_text,
    is_visible,
    resolve_object_view,
    select_option,
    visible_objects,
    visible_options,
)


def single_object_level(obj, initial_state):
    return Level(id="scenario", room=Room(background_image="", objects=[obj]), initial_state=initial_state)


def test_rug_becomes_visible_after_effect():
    rug = InteractiveObject(
        id="rug",
        area=Area(10, 10, 20, 20),
        text=[TextVariant("A rug.")],
        options=[Option("Look")],
        visible_condition=Condition(required_true=["rugLifted"]),
    )
    level = single_object_level(rug, {"rugLifted": False})
    flags = dict(level.initial_state)

    assert is_visible(rug, flags) is False
    flags = apply({"setTrue": ["rugLifted"]}, flags)
    assert is_visible(rug, flags) is True


def test_active_text_uses_ungated_fallback():
    door = InteractiveObject(
        id="door",
        area=Area(10, 10, 20, 20),
        text=[
            TextVariant("The door is open.", Condition(required_true=["doorOpen"])),
            TextVariant("The door is shut."),
        ],
        options=[Option("Push")],
    )
    assert active_text(door, {"doorOpen": False}).content == "The door is shut."
    assert active_text(door, {"doorOpen": True}).content == "The door is open."


def test_active_text_defaults_to_first_entry_when_nothing_matches():
    obj = InteractiveObject(
        id="box",
        area=Area(0, 0, 10, 10),
        text=[
            TextVariant("first", Condition(required_true=["a"])),
            TextVariant("second", Condition(required_true=["b"])),
        ],
        options=[Option("Open")],
    )
    assert active_text(obj, {}).content == "first"


def test_active_text_always_defined():
    obj = InteractiveObject(
        id="box",
        area=Area(0, 0, 10, 10),
        text=[
            TextVariant("a only", Condition(required_true=["a"])),
            TextVariant("b absent", Condition(required_false=["b"])),
        ],
        options=[Option("Open")],
    )
    for a, b in itertools.product([True, False], repeat=2):
        assert active_text(obj, {"a": a, "b": b}) is not None


def test_visible_options_filter(level_doc):
    level = validate_level(level_doc)
    door = level.room.get_object("door")

    labels = [o.label for o in visible_options(door, level.initial_state)]
    assert labels == ["Kick it"]

    flags = {"noteRead": True, "rugLifted": True, "doorOpen": False}
    assert [o.label for o in visible_options(door, flags)] == ["Unlock", "Kick it"]


def test_select_option_outcomes():
    flags = {"x": False}
    for action, expected in [("none", Outcome.CONTINUE), ("finish", Outcome.WIN),
                             ("fail", Outcome.LOSE), ("next", Outcome.ADVANCE)]:
        new_flags, outcome = select_option(Option("go", action=action), flags)
        assert outcome is expected
        assert new_flags == flags


def test_select_option_applies_effects():
    option = Option.from_dict({"label": "Take", "effects": {"setTrue": ["x"]}})
    new_flags, outcome = select_option(option, {"x": False})
    assert new_flags == {"x": True}
    assert outcome is Outcome.CONTINUE


def test_visible_objects_and_view(level_doc):
    level = validate_level(level_doc)
    ids = [o.id for o in visible_objects(level.room, level.initial_state)]
    assert ids == ["note", "door"]

    view = resolve_object_view(level.room.get_object("rug"), level.initial_state)
    assert view.is_visible is False
    assert view.text.content == "A dusty rug."
