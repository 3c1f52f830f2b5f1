"""Presence modifiers: nullable, optional and required."""

from __future__ import annotations

from .combinators import not_
from .predicates import IS_NULL
from .validator import Validator


def nullable(validator: Validator) -> Validator:
    """Accept ``None`` when the key is present."""
    return validator.nullable()


def optional(validator: Validator) -> Validator:
    """Accept an absent key."""
    return validator.optional()


def required(validator: Validator) -> Validator:
    """Reject ``None`` (and absent keys), then apply ``validator``."""
    return not_(IS_NULL, message="is required") & validator
