"""Level document validation system.

Validates generated room documents in three passes:
1) normalize: strip fields the contract does not declare, fill defaults
2) structure: JSON schema compliance (shape, types, bounds, enums)
3) semantics: cross-references that the schema cannot express
   (every referenced flag declared in initialState, unique object ids,
   no flag both set and cleared by one effect)
"""
import copy
import logging
import math
from typing import Any, Dict, List, Set

import jsonschema
from jsonschema import Draft7Validator, validators
from jsonschema.exceptions import best_match

from escapeforge.errors import (
    ConflictingEffectError,
    DanglingFlagError,
    DuplicateObjectIdError,
    EmptyCollectionError,
    InvalidTypeError,
    MissingFieldError,
    OutOfRangeError,
    StructuralValidationError,
    UnknownEnumValueError,
    ValidationError,
)
from .dsl import condition_flags, conflicting_flags, effect_flags
from .model import Level
from .schema import LEVEL_SCHEMA

logger = logging.getLogger(__name__)


def _is_finite_number(checker, instance) -> bool:
    """JSON numbers exclude NaN and the infinities Python's json accepts."""
    if not Draft7Validator.TYPE_CHECKER.is_type(instance, "number"):
        return False
    return not isinstance(instance, float) or math.isfinite(instance)


LevelValidator = validators.extend(
    Draft7Validator,
    type_checker=Draft7Validator.TYPE_CHECKER.redefine("number", _is_finite_number),
)

_VALIDATOR = LevelValidator(LEVEL_SCHEMA)

_ERROR_CLASSES = {
    "required": MissingFieldError,
    "minLength": MissingFieldError,
    "minimum": OutOfRangeError,
    "maximum": OutOfRangeError,
    "exclusiveMinimum": OutOfRangeError,
    "exclusiveMaximum": OutOfRangeError,
    "minItems": EmptyCollectionError,
    "enum": UnknownEnumValueError,
}


def _format_path(parts) -> str:
    path = "$"
    for part in parts:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}"
    return path


def normalize(payload: Any, schema: Dict[str, Any] = LEVEL_SCHEMA, path: str = "$") -> Any:
    """Return a normalized deep copy of ``payload``.

    Object keys not declared in ``schema["properties"]`` are dropped when the
    schema forbids additional properties (transient fields such as an object's
    display ``name``). Declared defaults are filled in. Values whose type does
    not match the schema are copied untouched so the structural pass can
    reject them.
    """
    if isinstance(payload, dict) and schema.get("type") == "object":
        properties = schema.get("properties", {})
        additional = schema.get("additionalProperties", True)
        required = schema.get("required", [])
        out = {}
        for key, value in payload.items():
            if value is None and key in properties and key not in required:
                logger.debug(f"Dropping null optional field {path}.{key}")
            elif key in properties:
                out[key] = normalize(value, properties[key], f"{path}.{key}")
            elif additional is False:
                logger.debug(f"Dropping undeclared field {path}.{key}")
            elif isinstance(additional, dict):
                out[key] = normalize(value, additional, f"{path}.{key}")
            else:
                out[key] = copy.deepcopy(value)
        for key, prop in properties.items():
            if key not in out and "default" in prop:
                out[key] = copy.deepcopy(prop["default"])
        return out

    if isinstance(payload, list) and schema.get("type") == "array" and "items" in schema:
        return [normalize(item, schema["items"], f"{path}[{i}]") for i, item in enumerate(payload)]

    return copy.deepcopy(payload)


def validate_schema(payload: Any) -> bool:
    """Validate a normalized payload against the Level schema.

    Raises:
        StructuralValidationError: a subclass chosen from the failing keyword
    """
    error = best_match(_VALIDATOR.iter_errors(payload))
    if error is not None:
        raise _to_structural(error)
    return True


def _to_structural(error: jsonschema.ValidationError) -> StructuralValidationError:
    path = _format_path(error.absolute_path)
    if error.validator == "type" and isinstance(error.instance, float) and not math.isfinite(error.instance):
        return OutOfRangeError(f"{error.instance} is not a finite number", path)
    error_cls = _ERROR_CLASSES.get(error.validator, InvalidTypeError)
    return error_cls(error.message, path)


def _walk_references(payload: Dict[str, Any]):
    """Yield (path, referenced flag names) for every condition and effect."""
    for i, obj in enumerate(payload["room"]["objects"]):
        base = f"$.room.objects[{i}]"
        if "visibleCondition" in obj:
            yield f"{base}.visibleCondition", condition_flags(obj["visibleCondition"])
        for j, variant in enumerate(obj["text"]):
            if "condition" in variant:
                yield f"{base}.text[{j}].condition", condition_flags(variant["condition"])
        for j, option in enumerate(obj["options"]):
            if "condition" in option:
                yield f"{base}.options[{j}].condition", condition_flags(option["condition"])
            if "effects" in option:
                yield f"{base}.options[{j}].effects", effect_flags(option["effects"])


def referenced_flags(payload: Dict[str, Any]) -> Set[str]:
    """Every flag name read or written anywhere in a structurally valid room."""
    names: Set[str] = set()
    for _, flags in _walk_references(payload):
        names |= flags
    return names


def _semantic_errors(payload: Dict[str, Any]) -> List[ValidationError]:
    errors: List[ValidationError] = []

    declared = set(payload["initialState"])
    dangling = referenced_flags(payload) - declared
    if dangling:
        errors.append(DanglingFlagError(dangling))

    seen: Set[str] = set()
    for i, obj in enumerate(payload["room"]["objects"]):
        if obj["id"] in seen:
            errors.append(DuplicateObjectIdError(
                f"duplicate object id '{obj['id']}'", f"$.room.objects[{i}].id"))
        seen.add(obj["id"])

        for j, option in enumerate(obj["options"]):
            both = conflicting_flags(option.get("effects"))
            if both:
                errors.append(ConflictingEffectError(
                    f"flags both set and cleared: {', '.join(sorted(both))}",
                    f"$.room.objects[{i}].options[{j}].effects"))

    return errors


def validate_semantics(payload: Dict[str, Any]) -> bool:
    """Validate cross-references of a structurally valid payload.

    Raises:
        SemanticValidationError: the first semantic problem found
    """
    errors = _semantic_errors(payload)
    if errors:
        raise errors[0]
    return True


def validate_level(payload: Any) -> Level:
    """Normalize and validate an untrusted document.

    Args:
        payload: Parsed JSON value claiming to be a Level

    Returns:
        The canonical Level

    Raises:
        StructuralValidationError: shape, type, bound or enum violations
        SemanticValidationError: dangling flags, duplicate ids, conflicting effects
    """
    document = normalize(payload)
    validate_schema(document)
    validate_semantics(document)
    return Level.from_dict(document)


def collect_issues(payload: Any) -> List[str]:
    """Report every validation issue without raising.

    Returns:
        List of messages (empty if the document is valid)
    """
    document = normalize(payload)
    issues = [
        f"[structure] {_to_structural(error)}"
        for error in sorted(_VALIDATOR.iter_errors(document), key=lambda e: list(map(str, e.absolute_path)))
    ]
    if issues:
        return issues
    return [f"[semantics] {error}" for error in _semantic_errors(document)]
