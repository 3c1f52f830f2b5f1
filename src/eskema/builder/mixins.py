"""Type-specific chain methods mixed into the typed builders.

Each mixin relies only on ``BaseBuilder.add``/``wrap``/``chain``; the typed
builders in ``builders`` pick the mixins that make sense for their type.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from re import Pattern as RegexPattern
from typing import TYPE_CHECKING, Any

from .. import predicates as p
from .. import transformers as tr
from ..combinators import all_of, any_of
from ..structure import eskema, eskema_strict, list_each
from ..validator import Validator
from .chain import CoercionKind, CustomPivot

if TYPE_CHECKING:
    from .builders import (
        BoolBuilder,
        DateTimeBuilder,
        FloatBuilder,
        GenericBuilder,
        IntBuilder,
        JsonDecodedBuilder,
        ListBuilder,
        NumberBuilder,
        StringBuilder,
    )


class TransformerMixin:
    """Coercions: each installs the chain's single type pivot.

    Repeating the active kind keeps the existing coercion so constraints
    added before and after accumulate. A different kind replaces it and
    drops the constraints that targeted the previous type. Constraints added
    before the first coercion are dropped too unless ``preserve_pre=True``,
    in which case they keep validating the original value.
    """

    def _coerce(
        self,
        kind: CoercionKind,
        coercion: Callable[..., Validator],
        builder_cls: type,
        message: str | None,
        preserve_pre: bool = False,
    ) -> Any:
        if not self.chain.is_kind(kind):
            self.chain.set_coercion(
                kind, lambda child: coercion(child, message=message), drop_pre=not preserve_pre
            )
        return self._become(builder_cls)

    def to_int(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> IntBuilder:
        from .builders import IntBuilder

        return self._coerce(CoercionKind.INT, tr.to_int, IntBuilder, message, preserve_pre)

    def to_int_strict(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> IntBuilder:
        from .builders import IntBuilder

        return self._coerce(CoercionKind.INT, tr.to_int_strict, IntBuilder, message, preserve_pre)

    def to_int_safe(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> IntBuilder:
        from .builders import IntBuilder

        return self._coerce(CoercionKind.INT, tr.to_int_safe, IntBuilder, message, preserve_pre)

    def to_float(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> FloatBuilder:
        from .builders import FloatBuilder

        return self._coerce(CoercionKind.FLOAT, tr.to_float, FloatBuilder, message, preserve_pre)

    def to_number(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> NumberBuilder:
        from .builders import NumberBuilder

        if self.chain.is_kind(CoercionKind.INT):
            return self._become(NumberBuilder)
        return self._coerce(CoercionKind.FLOAT, tr.to_number, NumberBuilder, message, preserve_pre)

    def to_bool(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> BoolBuilder:
        from .builders import BoolBuilder

        return self._coerce(CoercionKind.BOOL, tr.to_bool, BoolBuilder, message, preserve_pre)

    def to_bool_strict(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> BoolBuilder:
        from .builders import BoolBuilder

        return self._coerce(
            CoercionKind.BOOL, tr.to_bool_strict, BoolBuilder, message, preserve_pre
        )

    def to_bool_lenient(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> BoolBuilder:
        from .builders import BoolBuilder

        return self._coerce(
            CoercionKind.BOOL, tr.to_bool_lenient, BoolBuilder, message, preserve_pre
        )

    def to_str(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> StringBuilder:
        from .builders import StringBuilder

        return self._coerce(CoercionKind.STRING, tr.to_str, StringBuilder, message, preserve_pre)

    def to_datetime(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> DateTimeBuilder:
        from .builders import DateTimeBuilder

        return self._coerce(
            CoercionKind.DATETIME, tr.to_datetime, DateTimeBuilder, message, preserve_pre
        )

    def to_date_only(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> DateTimeBuilder:
        from .builders import DateTimeBuilder

        return self._coerce(
            CoercionKind.DATETIME, tr.to_date_only, DateTimeBuilder, message, preserve_pre
        )

    def to_json(
        self, message: str | None = None, preserve_pre: bool = False
    ) -> JsonDecodedBuilder:
        from .builders import JsonDecodedBuilder

        return self._coerce(
            CoercionKind.JSON, tr.to_json, JsonDecodedBuilder, message, preserve_pre
        )

    def use(self, pivot: CustomPivot) -> GenericBuilder:
        """Install a user-defined coercion; composes with any existing one."""
        from .builders import GenericBuilder

        self.chain.set_coercion(CoercionKind.CUSTOM, pivot.transformer, drop_pre=pivot.drop_pre)
        return self._become(GenericBuilder)


class LengthMixin:
    def length(self, validators: Iterable[Validator], message: str | None = None) -> Any:
        return self.add(p.length(validators), message=message)

    def min_length(self, minimum: int, message: str | None = None) -> Any:
        return self.length([p.is_gte(minimum)], message=message)

    def max_length(self, maximum: int, message: str | None = None) -> Any:
        return self.length([p.is_lte(maximum)], message=message)

    def length_range(self, minimum: int, maximum: int, message: str | None = None) -> Any:
        return self.length([p.is_in_range(minimum, maximum)], message=message)


class EmptyMixin:
    def empty(self, message: str | None = None) -> Any:
        return self.add(p.is_empty(), message=message)


class ContainsMixin:
    def contains(self, item: Any, message: str | None = None) -> Any:
        return self.add(p.contains(item), message=message)


class BoolMixin:
    def is_true(self, message: str = "true") -> Any:
        return self.add(p.is_eq(True), message=message)

    def is_false(self, message: str = "false") -> Any:
        return self.add(p.is_eq(False), message=message)


class NumberMixin:
    def lt(self, limit: Any, message: str | None = None) -> Any:
        return self.add(p.is_lt(limit), message=message)

    def lte(self, limit: Any, message: str | None = None) -> Any:
        return self.add(p.is_lte(limit), message=message)

    def gt(self, limit: Any, message: str | None = None) -> Any:
        return self.add(p.is_gt(limit), message=message)

    def gte(self, limit: Any, message: str | None = None) -> Any:
        return self.add(p.is_gte(limit), message=message)

    def between(self, minimum: Any, maximum: Any, message: str | None = None) -> Any:
        return self.add(p.is_in_range(minimum, maximum), message=message)


class StringMixin:
    """String format checks and normalizers.

    Normalizers (``trim``, ``to_lower``, ...) transform the value for the
    constraints added after them.
    """

    def matches(self, pattern: str | RegexPattern, message: str | None = None) -> Any:
        return self.add(p.matches_pattern(pattern), message=message)

    def email(self, message: str | None = None) -> Any:
        return self.add(p.is_email(), message=message)

    def url(self, strict: bool = False, message: str | None = None) -> Any:
        return self.add(p.is_url(strict=strict), message=message)

    def lower_case(self, message: str | None = None) -> Any:
        return self.add(p.is_lower_case(), message=message)

    def upper_case(self, message: str | None = None) -> Any:
        return self.add(p.is_upper_case(), message=message)

    def int_string(self, message: str | None = None) -> Any:
        return self.add(p.IS_INT_STRING, message=message)

    def float_string(self, message: str | None = None) -> Any:
        return self.add(p.IS_FLOAT_STRING, message=message)

    def number_string(self, message: str | None = None) -> Any:
        return self.add(p.IS_NUMBER_STRING, message=message)

    def bool_string(self, message: str | None = None) -> Any:
        return self.add(p.IS_BOOL_STRING, message=message)

    def date_string(self, message: str | None = None) -> Any:
        return self.add(p.IS_DATE_STRING, message=message)

    def trim(self) -> Any:
        return self.wrap(tr.trim)

    def collapse_whitespace(self) -> Any:
        return self.wrap(tr.collapse_whitespace)

    def to_lower(self) -> Any:
        return self.wrap(tr.to_lower)

    def to_upper(self) -> Any:
        return self.wrap(tr.to_upper)

    def split(self, separator: str, message: str | None = None) -> ListBuilder:
        """Continue the chain on the parts of the string.

        Constraints added so far keep checking the string itself.
        """
        from .builders import ListBuilder

        self.chain.set_coercion(
            CoercionKind.CUSTOM,
            lambda child: tr.split(separator, child, message=message),
            drop_pre=False,
        )
        return self._become(ListBuilder)


class MapMixin:
    def schema(self, schema: Mapping[str, Validator]) -> Any:
        return self.add(eskema(schema))

    def strict(self, schema: Mapping[str, Validator]) -> Any:
        return self.add(eskema_strict(schema))

    def contains_key(self, key: str, message: str | None = None) -> Any:
        return self.add(p.contains_key(key), message=message)

    def pick(self, keys: Iterable[str]) -> Any:
        """Validate with only ``keys`` of the map kept."""
        wanted = list(keys)
        return self.wrap(lambda current: tr.pick_keys(wanted, current))

    def pluck_value(self, key: str) -> GenericBuilder:
        """Continue the chain on ``value[key]``; earlier constraints still see the map.

        Raises:
            BuilderError: If a coercion is already installed
        """
        from .builders import GenericBuilder

        self.chain.pluck(key)
        return self._become(GenericBuilder)

    def flatten_keys(self, delimiter: str = ".") -> Any:
        return self.wrap(lambda current: tr.flatten_keys(delimiter, current))


class DateTimeMixin:
    def before(self, moment: datetime, inclusive: bool = False, message: str | None = None) -> Any:
        return self.add(p.is_date_before(moment, inclusive=inclusive), message=message)

    def after(self, moment: datetime, inclusive: bool = False, message: str | None = None) -> Any:
        return self.add(p.is_date_after(moment, inclusive=inclusive), message=message)

    def between_dates(
        self,
        start: datetime,
        end: datetime,
        inclusive_start: bool = True,
        inclusive_end: bool = True,
        message: str | None = None,
    ) -> Any:
        return self.add(
            p.is_date_between(
                start, end, inclusive_start=inclusive_start, inclusive_end=inclusive_end
            ),
            message=message,
        )

    def same_day(self, moment: datetime, message: str | None = None) -> Any:
        return self.add(p.is_date_same_day(moment), message=message)

    def in_past(self, allow_now: bool = True, message: str | None = None) -> Any:
        return self.add(p.is_date_in_past(allow_now=allow_now), message=message)

    def in_future(self, allow_now: bool = True, message: str | None = None) -> Any:
        return self.add(p.is_date_in_future(allow_now=allow_now), message=message)


class JsonMixin:
    """Checks on decoded JSON documents."""

    def json_container(self, message: str | None = None) -> Any:
        return self.add(any_of([p.IS_MAP, p.IS_LIST]), message=message)

    def json_object(self, message: str | None = None) -> Any:
        return self.add(p.IS_MAP, message=message)

    def json_array(self, message: str | None = None) -> Any:
        return self.add(p.IS_LIST, message=message)

    def json_requires_keys(self, keys: Iterable[str], message: str | None = None) -> Any:
        checks = [p.contains_key(key) for key in keys]
        return self.add(all_of([p.IS_MAP, *checks], collecting=True), message=message)

    def json_array_len(
        self,
        minimum: int | None = None,
        maximum: int | None = None,
        message: str | None = None,
    ) -> Any:
        bounds = []
        if minimum is not None:
            bounds.append(p.is_gte(minimum))
        if maximum is not None:
            bounds.append(p.is_lte(maximum))
        return self.add(p.IS_LIST & p.length(bounds), message=message)

    def json_array_each(self, element: Validator, message: str | None = None) -> Any:
        return self.add(list_each(element), message=message)


class IterableMixin:
    def each(self, element: Validator, message: str | None = None) -> Any:
        """Validate every element with ``element``."""
        return self.add(list_each(element), message=message)
