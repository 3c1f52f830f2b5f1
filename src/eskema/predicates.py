"""Leaf predicates used by the builder entry points and the coercions.

Type guards, comparisons, length, pattern, membership, string format and
date checks. Anything implementing the ``Validator`` contract can be
used alongside them.

Zero-argument predicates are also available as module constants created
once at import (``IS_STRING``, ``IS_INT``, ...).
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Iterable, Mapping, Sized
from datetime import date, datetime
from re import Pattern as RegexPattern
from typing import Any
from urllib.parse import urlparse

from .combinators import all_of, any_of
from .expectation import Expectation, ExpectationCodes
from .formatting import pretty_value
from .result import Result
from .validator import FunctionValidator, Outcome, Validator, then, validator


def is_type(
    types: type | tuple[type, ...],
    name: str | None = None,
    message: str | None = None,
    exclude_bool: bool = False,
) -> Validator:
    """Check ``isinstance(value, types)``.

    Args:
        types: Accepted type or tuple of types
        name: Type name used in messages (defaults to the type's ``__name__``)
        message: Override the expectation message
        exclude_bool: Reject ``bool`` even though it subclasses ``int``

    Returns:
        Type guard validator
    """
    if name is None:
        name = types.__name__ if isinstance(types, type) else " | ".join(t.__name__ for t in types)

    def predicate(value: Any) -> bool:
        if exclude_bool and isinstance(value, bool):
            return False
        return isinstance(value, types)

    return validator(
        predicate,
        lambda value: Expectation(
            message=message or name,
            value=value,
            code=ExpectationCodes.TYPE_MISMATCH,
            data={"expected": name, "found": type(value).__name__},
        ),
        name=f"is_type({name})",
    )


def is_null(message: str | None = None) -> Validator:
    return is_type(type(None), name="None", message=message)


def is_string(message: str | None = None) -> Validator:
    return is_type(str, message=message)


def is_int(message: str | None = None) -> Validator:
    return is_type(int, message=message, exclude_bool=True)


def is_float(message: str | None = None) -> Validator:
    return is_type(float, message=message)


def is_number(message: str | None = None) -> Validator:
    return is_type((int, float), name="number", message=message, exclude_bool=True)


def is_bool(message: str | None = None) -> Validator:
    return is_type(bool, message=message)


def is_list(message: str | None = None) -> Validator:
    return is_type(list, message=message)


def is_map(message: str | None = None) -> Validator:
    return is_type(Mapping, name="dict", message=message)


def is_datetime(message: str | None = None) -> Validator:
    return is_type(datetime, message=message)


def _comparison(
    op: Callable[[Any, Any], bool],
    limit: Any,
    message: str,
    code: str,
    data: dict[str, Any],
) -> Validator:
    def predicate(value: Any) -> bool:
        try:
            return bool(op(value, limit))
        except TypeError:
            # Values that cannot be ordered against the limit do not satisfy it
            return False

    return validator(
        predicate,
        lambda value: Expectation(message=message, value=value, code=code, data=data),
    )


def is_eq(expected: Any, message: str | None = None) -> Validator:
    return _comparison(
        operator.eq,
        expected,
        message or f"equal to {pretty_value(expected)}",
        ExpectationCodes.VALUE_EQUAL_MISMATCH,
        {"expected": expected},
    )


def is_gt(limit: Any, message: str | None = None) -> Validator:
    return _comparison(
        operator.gt,
        limit,
        message or f"greater than {pretty_value(limit)}",
        ExpectationCodes.VALUE_RANGE_OUT_OF_BOUNDS,
        {"min": limit, "inclusive": False},
    )


def is_gte(limit: Any, message: str | None = None) -> Validator:
    return _comparison(
        operator.ge,
        limit,
        message or f"greater than or equal to {pretty_value(limit)}",
        ExpectationCodes.VALUE_RANGE_OUT_OF_BOUNDS,
        {"min": limit, "inclusive": True},
    )


def is_lt(limit: Any, message: str | None = None) -> Validator:
    return _comparison(
        operator.lt,
        limit,
        message or f"less than {pretty_value(limit)}",
        ExpectationCodes.VALUE_RANGE_OUT_OF_BOUNDS,
        {"max": limit, "inclusive": False},
    )


def is_lte(limit: Any, message: str | None = None) -> Validator:
    return _comparison(
        operator.le,
        limit,
        message or f"less than or equal to {pretty_value(limit)}",
        ExpectationCodes.VALUE_RANGE_OUT_OF_BOUNDS,
        {"max": limit, "inclusive": True},
    )


def is_in_range(min: Any, max: Any, message: str | None = None) -> Validator:
    """Inclusive range check."""
    if min > max:
        raise ValueError(f"min ({min}) cannot be greater than max ({max})")
    return _comparison(
        lambda value, bounds: bounds[0] <= value <= bounds[1],
        (min, max),
        message or f"between {pretty_value(min)} and {pretty_value(max)} (inclusive)",
        ExpectationCodes.VALUE_RANGE_OUT_OF_BOUNDS,
        {"min": min, "max": max, "inclusive": True},
    )


def is_one_of(options: Iterable[Any], message: str | None = None) -> Validator:
    allowed = list(options)
    return validator(
        lambda value: value in allowed,
        lambda value: Expectation(
            message=message or f"one of: {pretty_value(allowed)}",
            value=value,
            code=ExpectationCodes.VALUE_MEMBERSHIP_MISMATCH,
            data={"options": allowed},
        ),
    )


def length(validators: Iterable[Validator], message: str | None = None) -> Validator:
    """Validate ``len(value)`` with ``validators``; the value itself is kept."""
    inner = all_of(validators)

    def check(value: Any) -> Outcome:
        if not isinstance(value, Sized):
            return Result.failure(
                value,
                expectation=Expectation(
                    message=message or "a value with a length",
                    value=value,
                    code=ExpectationCodes.TYPE_MISMATCH,
                    data={"expected": "sized", "found": type(value).__name__},
                ),
            )
        size = len(value)

        def settle(result: Result) -> Result:
            if result.is_valid:
                return Result.success(value)
            return Result.failure(
                value,
                [
                    Expectation(
                        message=message or f"length {exp.message}",
                        value=value,
                        code=ExpectationCodes.VALUE_LENGTH_OUT_OF_RANGE,
                        data={"length": size},
                    )
                    for exp in result.expectations
                ],
            )

        return then(inner.evaluate(size), settle)

    return FunctionValidator(
        check,
        name="length",
        describe=lambda value: Expectation(
            message=message or "a value of the required length",
            value=value,
            code=ExpectationCodes.VALUE_LENGTH_OUT_OF_RANGE,
        ),
    )


def is_empty(message: str | None = None) -> Validator:
    return length([is_eq(0)], message=message or "empty")


def contains(item: Any, message: str | None = None) -> Validator:
    def predicate(value: Any) -> bool:
        try:
            return item in value
        except TypeError:
            return False

    return validator(
        predicate,
        lambda value: Expectation(
            message=message or f"contains {pretty_value(item)}",
            value=value,
            code=ExpectationCodes.VALUE_CONTAINS_MISSING,
            data={"needle": item},
        ),
    )


def contains_key(key: str, message: str | None = None) -> Validator:
    return validator(
        lambda value: isinstance(value, Mapping) and key in value,
        lambda value: Expectation(
            message=message or f'contains key "{key}"',
            value=value,
            code=ExpectationCodes.VALUE_CONTAINS_MISSING,
            data={"key": key},
        ),
    )


def matches_pattern(pattern: str | RegexPattern, message: str | None = None) -> Validator:
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    return validator(
        lambda value: isinstance(value, str) and regex.search(value) is not None,
        lambda value: Expectation(
            message=message or f"matches pattern {regex.pattern}",
            value=value,
            code=ExpectationCodes.VALUE_PATTERN_MISMATCH,
            data={"pattern": regex.pattern},
        ),
    )


_INT_STRING = re.compile(r"^[+-]?\d+$")
_BOOL_STRINGS = ("true", "false")


def _parses_float(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


def _parses_date(value: str) -> bool:
    try:
        datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        try:
            date.fromisoformat(value.strip())
        except ValueError:
            return False
    return True


def _format_check(predicate: Callable[[str], bool], message: str, fmt: str) -> Validator:
    return validator(
        lambda value: isinstance(value, str) and predicate(value),
        lambda value: Expectation(
            message=message,
            value=value,
            code=ExpectationCodes.VALUE_FORMAT_INVALID,
            data={"format": fmt},
        ),
    )


def is_int_string(message: str | None = None) -> Validator:
    return _format_check(
        lambda s: _INT_STRING.match(s.strip()) is not None,
        message or "a valid formatted int string",
        "int",
    )


def is_float_string(message: str | None = None) -> Validator:
    return _format_check(_parses_float, message or "a valid formatted float string", "float")


def is_number_string(message: str | None = None) -> Validator:
    return any_of([is_int_string(), is_float_string()], message=message)


def is_bool_string(message: str | None = None) -> Validator:
    return _format_check(
        lambda s: s.strip().lower() in _BOOL_STRINGS,
        message or "a valid formatted bool string",
        "bool",
    )


def is_date_string(message: str | None = None) -> Validator:
    return _format_check(_parses_date, message or "a valid ISO 8601 date string", "datetime")


_EMAIL = re.compile(r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$")


def is_email(message: str | None = None) -> Validator:
    return _format_check(
        lambda s: _EMAIL.match(s) is not None, message or "a valid email address", "email"
    )


def is_url(strict: bool = False, message: str | None = None) -> Validator:
    """Check for a URL; ``strict`` requires an http(s) scheme and a host."""

    def parses(value: str) -> bool:
        try:
            parts = urlparse(value)
        except ValueError:
            return False
        if strict:
            return parts.scheme in ("http", "https") and bool(parts.netloc)
        return bool(parts.netloc) or (bool(parts.scheme) and bool(parts.path))

    return _format_check(parses, message or "a valid URL", "url")


def is_lower_case(message: str | None = None) -> Validator:
    return _format_check(lambda s: s == s.lower(), message or "a lowercase string", "lowercase")


def is_upper_case(message: str | None = None) -> Validator:
    return _format_check(lambda s: s == s.upper(), message or "an uppercase string", "uppercase")


def _date_check(
    predicate: Callable[[datetime], bool],
    message: str,
    data: dict[str, Any],
) -> Validator:
    def check(value: Any) -> bool:
        if not isinstance(value, datetime):
            return False
        try:
            return predicate(value)
        except TypeError:
            # naive and aware datetimes cannot be compared
            return False

    return validator(
        check,
        lambda value: Expectation(
            message=message,
            value=value,
            code=ExpectationCodes.VALUE_DATE_OUT_OF_RANGE,
            data=data,
        ),
    )


def is_date_before(moment: datetime, inclusive: bool = False, message: str | None = None) -> Validator:
    return _date_check(
        (lambda d: d <= moment) if inclusive else (lambda d: d < moment),
        message or f"a date before {moment.isoformat()}",
        {"before": moment.isoformat(), "inclusive": inclusive},
    )


def is_date_after(moment: datetime, inclusive: bool = False, message: str | None = None) -> Validator:
    return _date_check(
        (lambda d: d >= moment) if inclusive else (lambda d: d > moment),
        message or f"a date after {moment.isoformat()}",
        {"after": moment.isoformat(), "inclusive": inclusive},
    )


def is_date_between(
    start: datetime,
    end: datetime,
    inclusive_start: bool = True,
    inclusive_end: bool = True,
    message: str | None = None,
) -> Validator:
    if end < start:
        raise ValueError(f"end ({end.isoformat()}) must not be before start ({start.isoformat()})")

    def within(d: datetime) -> bool:
        lower = d >= start if inclusive_start else d > start
        upper = d <= end if inclusive_end else d < end
        return lower and upper

    return _date_check(
        within,
        message or f"a date between {start.isoformat()} and {end.isoformat()}",
        {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "inclusive_start": inclusive_start,
            "inclusive_end": inclusive_end,
        },
    )


def is_date_same_day(moment: datetime, message: str | None = None) -> Validator:
    return _date_check(
        lambda d: d.date() == moment.date(),
        message or f"a date on {moment.date().isoformat()}",
        {"day": moment.date().isoformat()},
    )


def is_date_in_past(allow_now: bool = True, message: str | None = None) -> Validator:
    def in_past(d: datetime) -> bool:
        now = datetime.now(d.tzinfo)
        return d <= now if allow_now else d < now

    return _date_check(in_past, message or "a date in the past", {"allow_now": allow_now})


def is_date_in_future(allow_now: bool = True, message: str | None = None) -> Validator:
    def in_future(d: datetime) -> bool:
        now = datetime.now(d.tzinfo)
        return d >= now if allow_now else d > now

    return _date_check(in_future, message or "a date in the future", {"allow_now": allow_now})


IS_NULL = is_null()
IS_STRING = is_string()
IS_INT = is_int()
IS_FLOAT = is_float()
IS_NUMBER = is_number()
IS_BOOL = is_bool()
IS_LIST = is_list()
IS_MAP = is_map()
IS_DATETIME = is_datetime()
IS_INT_STRING = is_int_string()
IS_FLOAT_STRING = is_float_string()
IS_NUMBER_STRING = is_number_string()
IS_BOOL_STRING = is_bool_string()
IS_DATE_STRING = is_date_string()
