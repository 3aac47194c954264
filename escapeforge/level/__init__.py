"""Room document package: models, flag DSL, schema and validation."""

from .model import (
    Condition, Effect, TextVariant, Option, Area, InteractiveObject, Room, Level,
    FlagSet, Action, ACTIONS, ArtStyle, ART_STYLES,
)
from .dsl import evaluate, apply, condition_flags, effect_flags
from .schema import LEVEL_SCHEMA
from .validator import validate_level, validate_schema, validate_semantics, normalize, collect_issues

__all__ = [
    'Condition', 'Effect', 'TextVariant', 'Option', 'Area', 'InteractiveObject', 'Room', 'Level',
    'FlagSet', 'Action', 'ACTIONS', 'ArtStyle', 'ART_STYLES',
    'evaluate', 'apply', 'condition_flags', 'effect_flags',
    'LEVEL_SCHEMA',
    'validate_level', 'validate_schema', 'validate_semantics', 'normalize', 'collect_issues',
]
