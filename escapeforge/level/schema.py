"""JSON schema definition for Level documents.

Defines the strict structure a generated room must follow before it can be
persisted or played. Every object level sets additionalProperties to False;
the validator strips undeclared fields before checking, so the schema's
declared properties are also the normalization whitelist.
"""

CONDITION_SCHEMA = {
    "type": "object",
    "properties": {
        "requiredTrue": {"type": "array", "minItems": 1, "items": {"type": "string", "minLength": 1}},
        "requiredFalse": {"type": "array", "minItems": 1, "items": {"type": "string", "minLength": 1}},
    },
    "additionalProperties": False
}

EFFECT_SCHEMA = {
    "type": "object",
    "properties": {
        "setTrue": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "setFalse": {"type": "array", "items": {"type": "string", "minLength": 1}},
    },
    "additionalProperties": False
}

TEXT_VARIANT_SCHEMA = {
    "type": "object",
    "required": ["content"],
    "properties": {
        "content": {"type": "string", "minLength": 1},
        "condition": CONDITION_SCHEMA,
    },
    "additionalProperties": False
}

OPTION_SCHEMA = {
    "type": "object",
    "required": ["label"],
    "properties": {
        "label": {"type": "string", "minLength": 1},
        "action": {"type": "string", "enum": ["finish", "fail", "next", "none"], "default": "none"},
        "effects": EFFECT_SCHEMA,
        "condition": CONDITION_SCHEMA,
    },
    "additionalProperties": False
}

AREA_SCHEMA = {
    "type": "object",
    "required": ["x", "y", "width", "height"],
    "properties": {
        "x": {"type": "number", "minimum": 0, "maximum": 100},
        "y": {"type": "number", "minimum": 0, "maximum": 100},
        "width": {"type": "number", "minimum": 1, "maximum": 100},
        "height": {"type": "number", "minimum": 1, "maximum": 100},
    },
    "additionalProperties": False
}

OBJECT_SCHEMA = {
    "type": "object",
    "required": ["id", "area", "text", "options"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "area": AREA_SCHEMA,
        "image": {"type": "string"},
        "video": {"type": "string"},
        "text": {"type": "array", "minItems": 1, "items": TEXT_VARIANT_SCHEMA},
        "options": {"type": "array", "minItems": 1, "items": OPTION_SCHEMA},
        "visibleCondition": CONDITION_SCHEMA,
    },
    "additionalProperties": False
}

ROOM_SCHEMA = {
    "type": "object",
    "required": ["backgroundImage", "objects"],
    "properties": {
        "backgroundImage": {"type": "string", "default": ""},
        "objects": {"type": "array", "minItems": 1, "items": OBJECT_SCHEMA},
    },
    "additionalProperties": False
}

LEVEL_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["id", "room", "initialState"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "room": ROOM_SCHEMA,
        "initialState": {
            "type": "object",
            "additionalProperties": {"type": "boolean"}
        },
    },
    "additionalProperties": False
}
