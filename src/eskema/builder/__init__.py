"""Fluent builder API."""

from .base import BaseBuilder
from .builders import (
    BoolBuilder,
    DateTimeBuilder,
    FloatBuilder,
    GenericBuilder,
    IntBuilder,
    IterableBuilder,
    JsonDecodedBuilder,
    ListBuilder,
    MapBuilder,
    NumberBuilder,
    RootBuilder,
    StringBuilder,
    v,
)
from .chain import Chain, CoercionContext, CoercionKind, CustomPivot

__all__ = [
    "BaseBuilder",
    "BoolBuilder",
    "Chain",
    "CoercionContext",
    "CoercionKind",
    "CustomPivot",
    "DateTimeBuilder",
    "FloatBuilder",
    "GenericBuilder",
    "IntBuilder",
    "IterableBuilder",
    "JsonDecodedBuilder",
    "ListBuilder",
    "MapBuilder",
    "NumberBuilder",
    "RootBuilder",
    "StringBuilder",
    "v",
]
