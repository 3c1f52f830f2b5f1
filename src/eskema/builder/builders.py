"""Typed builders and the ``v()`` entry point.

Example:
    ```python
    from eskema import v

    age = v().string().to_int().gte(0).lte(150).build()
    age.validate("42").value   # 42

    user = v().map_().schema({
        "name": v().string().min_length(1).build(),
        "email": v().string().email().build(),
        "tags": v().list_().each(v().string().build()).optional().build(),
    }).build()
    ```
"""

from __future__ import annotations

from .. import predicates as p
from .base import BaseBuilder
from .mixins import (
    BoolMixin,
    ContainsMixin,
    DateTimeMixin,
    EmptyMixin,
    IterableMixin,
    JsonMixin,
    LengthMixin,
    MapMixin,
    NumberMixin,
    StringMixin,
    TransformerMixin,
)


class StringBuilder(
    LengthMixin, EmptyMixin, TransformerMixin, StringMixin, ContainsMixin, BaseBuilder
):
    """Builder for strings."""


class NumberBuilder(TransformerMixin, NumberMixin, BaseBuilder):
    """Builder for ints and floats (``bool`` excluded)."""


class IntBuilder(NumberBuilder):
    pass


class FloatBuilder(NumberBuilder):
    pass


class BoolBuilder(TransformerMixin, BoolMixin, BaseBuilder):
    pass


class DateTimeBuilder(TransformerMixin, DateTimeMixin, BaseBuilder):
    pass


class IterableBuilder(LengthMixin, EmptyMixin, IterableMixin, ContainsMixin, BaseBuilder):
    """Builder for sized collections."""


class ListBuilder(IterableBuilder):
    pass


class MapBuilder(LengthMixin, EmptyMixin, TransformerMixin, MapMixin, ContainsMixin, BaseBuilder):
    """Builder for dicts and other mappings."""


class JsonDecodedBuilder(TransformerMixin, JsonMixin, MapMixin, IterableMixin, BaseBuilder):
    """Builder for the result of ``to_json()``."""


class GenericBuilder(
    NumberMixin,
    LengthMixin,
    EmptyMixin,
    TransformerMixin,
    StringMixin,
    MapMixin,
    DateTimeMixin,
    JsonMixin,
    IterableMixin,
    BoolMixin,
    ContainsMixin,
    BaseBuilder,
):
    """Builder exposing every chain method, for values of unknown type."""


class RootBuilder:
    """Typed entry points; each seeds the chain with a type guard."""

    def string(self, message: str | None = None) -> StringBuilder:
        return StringBuilder().add(p.IS_STRING, message=message)

    def int_(self, message: str | None = None) -> IntBuilder:
        return IntBuilder().add(p.IS_INT, message=message)

    def float_(self, message: str | None = None) -> FloatBuilder:
        return FloatBuilder().add(p.IS_FLOAT, message=message)

    def number(self, message: str | None = None) -> NumberBuilder:
        return NumberBuilder().add(p.IS_NUMBER, message=message)

    def bool_(self, message: str | None = None) -> BoolBuilder:
        return BoolBuilder().add(p.IS_BOOL, message=message)

    def list_(self, message: str | None = None) -> ListBuilder:
        return ListBuilder().add(p.IS_LIST, message=message)

    def iterable(self, message: str | None = None) -> IterableBuilder:
        return IterableBuilder().add(
            p.is_type((list, tuple, set, frozenset), name="iterable"), message=message
        )

    def map_(self, message: str | None = None) -> MapBuilder:
        return MapBuilder().add(p.IS_MAP, message=message)

    def datetime(self, message: str | None = None) -> DateTimeBuilder:
        return DateTimeBuilder().add(p.IS_DATETIME, message=message)

    def type_(
        self,
        types: type | tuple[type, ...],
        name: str | None = None,
        message: str | None = None,
    ) -> GenericBuilder:
        """Generic entry point guarded by ``isinstance(value, types)``."""
        return GenericBuilder().add(p.is_type(types, name=name), message=message)


def v() -> RootBuilder:
    """Start a builder chain."""
    return RootBuilder()
