"""Condition/Effect evaluation over a FlagSet.

Pure functions, no side effects:
- evaluate: check a Condition (requiredTrue / requiredFalse) against flags
- apply: produce a new FlagSet with an Effect (setTrue / setFalse) applied

Both accept the dataclasses from ``model`` or the raw document dicts. Missing
or malformed clauses are treated as empty.
"""

from typing import List, Mapping, Optional, Set, Union
from .model import Condition, Effect, FlagSet

ConditionLike = Union[Condition, Mapping, None]
EffectLike = Union[Effect, Mapping, None]


def _clause(obj, attr: str, key: str) -> List[str]:
    if obj is None:
        return []
    if isinstance(obj, Mapping):
        value = obj.get(key)
    else:
        value = getattr(obj, attr, None)
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [name for name in value if isinstance(name, str)]


def evaluate(condition: ConditionLike, flags: Mapping[str, bool]) -> bool:
    """Check whether a condition holds.

    Args:
        condition: The condition to evaluate (None is vacuously true)
        flags: Current flag values; absent keys read as False

    Returns:
        True if every requiredTrue flag is true and every requiredFalse flag
        is false or absent
    """
    if condition is None:
        return True

    for key in _clause(condition, "required_true", "requiredTrue"):
        if not flags.get(key, False):
            return False

    for key in _clause(condition, "required_false", "requiredFalse"):
        if flags.get(key, False):
            return False

    return True


def apply(effect: EffectLike, flags: Mapping[str, bool]) -> FlagSet:
    """Apply an effect and return the resulting FlagSet.

    The input mapping is never mutated. setFalse is applied after setTrue.
    """
    new_flags = dict(flags)
    if effect is None:
        return new_flags

    for key in _clause(effect, "set_true", "setTrue"):
        new_flags[key] = True

    for key in _clause(effect, "set_false", "setFalse"):
        new_flags[key] = False

    return new_flags


def condition_flags(condition: ConditionLike) -> Set[str]:
    """Flag names a condition reads."""
    return set(_clause(condition, "required_true", "requiredTrue")) | set(
        _clause(condition, "required_false", "requiredFalse")
    )


def effect_flags(effect: EffectLike) -> Set[str]:
    """Flag names an effect writes."""
    return set(_clause(effect, "set_true", "setTrue")) | set(_clause(effect, "set_false", "setFalse"))


def conflicting_flags(effect: Optional[EffectLike]) -> Set[str]:
    """Flag names present in both setTrue and setFalse of one effect."""
    return set(_clause(effect, "set_true", "setTrue")) & set(_clause(effect, "set_false", "setFalse"))
