"""Value-transforming validators.

A transformer converts the incoming value and hands the converted value to
a child validator. The child's result, and therefore the converted value,
becomes the transformer's result, which is how coercions thread new values
through a conjunction.

Coercions guard the input first (``"abc"`` never reaches ``int()``), then
convert; a conversion that still fails reports ``value.coercion_failed``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from typing import Any

from .combinators import any_of, with_expectation
from .expectation import Expectation, ExpectationCodes
from .predicates import (
    IS_BOOL,
    IS_BOOL_STRING,
    IS_FLOAT,
    IS_FLOAT_STRING,
    IS_INT,
    IS_INT_STRING,
    IS_LIST,
    IS_MAP,
    IS_NUMBER,
    IS_NUMBER_STRING,
    IS_STRING,
    contains_key,
    is_one_of,
    is_type,
)
from .result import Result
from .validator import VALID, FunctionValidator, Outcome, Validator, then, validator

_MISSING = object()

_TRUE_STRINGS = ("true", "1", "yes", "y", "on")
_FALSE_STRINGS = ("false", "0", "no", "n", "off")

_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%Y-%m-%d",
)


def transform(fn: Callable[[Any], Any], child: Validator = VALID) -> Validator:
    """Apply ``fn`` to the value, then validate the result with ``child``."""
    return FunctionValidator(lambda value: child.evaluate(fn(value)), name="transform")


def default_to(default: Any, child: Validator = VALID, message: str | None = None) -> Validator:
    """Replace ``None`` (or an absent value) with ``default``, then validate with ``child``."""
    base = FunctionValidator(
        lambda value: child.evaluate(default if value is None else value), name="default_to"
    )
    if message:
        return with_expectation(base, Expectation(message=message))
    return base


def pivot_value(
    fn: Callable[[Any], Any],
    child: Validator,
    error_message: str,
) -> Validator:
    """Replace the value with ``fn(value)`` before validating it.

    ``fn`` returns ``None``-safe results: it signals "cannot pivot" by
    returning the module's missing sentinel, so a plucked ``None`` is still a
    legitimate value.
    """

    def check(value: Any) -> Outcome:
        pivoted = fn(value)
        if pivoted is _MISSING:
            return Result.failure(
                value,
                expectation=Expectation(
                    message=error_message,
                    value=value,
                    code=ExpectationCodes.STRUCTURE_MISSING_KEY,
                ),
            )
        return child.evaluate(pivoted)

    return FunctionValidator(check, name="pivot")


def _coercion(
    guard: Validator,
    convert: Callable[[Any], Any],
    target: str,
    child: Validator,
    message: str | None,
) -> Validator:
    def check(value: Any) -> Outcome:
        def after_guard(guard_result: Result) -> Outcome:
            if guard_result.is_not_valid:
                return guard_result
            try:
                converted = convert(value)
            except (ValueError, TypeError, OverflowError) as e:
                return Result.failure(
                    value,
                    expectation=Expectation(
                        message=f"a value convertible to {target}",
                        value=value,
                        code=ExpectationCodes.VALUE_COERCION_FAILED,
                        data={"target": target, "error": str(e)},
                    ),
                )
            return child.evaluate(converted)

        return then(guard.evaluate(value), after_guard)

    base = FunctionValidator(check, name=f"to_{target}")
    if message:
        return with_expectation(base, Expectation(message=message))
    return base


def _int_from(value: Any) -> int:
    if isinstance(value, str):
        return int(value.strip())
    return int(value)


def to_int(child: Validator = VALID, message: str | None = None) -> Validator:
    """Coerce ints, floats (truncated) and int strings to ``int``."""
    return _coercion(any_of([IS_INT, IS_NUMBER, IS_INT_STRING]), _int_from, "int", child, message)


def to_int_strict(child: Validator = VALID, message: str | None = None) -> Validator:
    """Coerce ints and pure base-10 int strings; floats are rejected."""
    return _coercion(any_of([IS_INT, IS_INT_STRING]), _int_from, "int", child, message)


MAX_SAFE_INT = 2**53 - 1
"""Largest integer an IEEE-754 double represents exactly."""


def to_int_safe(child: Validator = VALID, message: str | None = None) -> Validator:
    """Like ``to_int_strict`` but limited to the 53-bit safe integer range."""
    in_safe_range = validator(
        lambda n: -MAX_SAFE_INT <= n <= MAX_SAFE_INT,
        lambda n: Expectation(
            message="an int within the safe 53-bit range",
            value=n,
            code=ExpectationCodes.VALUE_RANGE_OUT_OF_BOUNDS,
            data={"min": -MAX_SAFE_INT, "max": MAX_SAFE_INT},
        ),
    )
    return to_int_strict(in_safe_range & child, message=message)


def _float_from(value: Any) -> float:
    if isinstance(value, str):
        return float(value.strip())
    return float(value)


def to_float(child: Validator = VALID, message: str | None = None) -> Validator:
    """Coerce numbers and float strings to ``float``."""
    return _coercion(
        any_of([IS_FLOAT, IS_NUMBER, IS_FLOAT_STRING]), _float_from, "float", child, message
    )


def _number_from(value: Any) -> int | float:
    if isinstance(value, str):
        text = value.strip()
        return int(text) if IS_INT_STRING.is_valid(text) else float(text)
    return value


def to_number(child: Validator = VALID, message: str | None = None) -> Validator:
    """Coerce number strings to ``int`` or ``float``; numbers pass through."""
    return _coercion(any_of([IS_NUMBER, IS_NUMBER_STRING]), _number_from, "number", child, message)


def _bool_from(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def to_bool(child: Validator = VALID, message: str | None = None) -> Validator:
    """Coerce bools, ``0``/``1`` and ``"true"``/``"false"`` to ``bool``."""
    return _coercion(
        any_of([IS_BOOL, is_one_of([0, 1]), IS_BOOL_STRING]), _bool_from, "bool", child, message
    )


def to_bool_strict(child: Validator = VALID, message: str | None = None) -> Validator:
    """Coerce only bools and the exact strings ``"true"``/``"false"``."""
    return _coercion(
        any_of([IS_BOOL, is_one_of(["true", "false"])]), _bool_from, "bool", child, message
    )


def _lenient_bool_from(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"String '{value}' is not a valid boolean")
    return bool(value)


def to_bool_lenient(child: Validator = VALID, message: str | None = None) -> Validator:
    """Coerce yes/no, on/off, y/n, 1/0 and true/false (any case) to ``bool``."""
    lenient_string = validator(
        lambda v: isinstance(v, str) and v.strip().lower() in _TRUE_STRINGS + _FALSE_STRINGS,
        lambda v: Expectation(
            message="a boolean-like string",
            value=v,
            code=ExpectationCodes.VALUE_FORMAT_INVALID,
            data={"format": "bool"},
        ),
    )
    return _coercion(
        any_of([IS_BOOL, is_one_of([0, 1]), lenient_string]),
        _lenient_bool_from,
        "bool",
        child,
        message,
    )


def _str_from(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_str(child: Validator = VALID, message: str | None = None) -> Validator:
    """Render any non-null value as a string."""
    not_null = validator(
        lambda v: v is not None,
        lambda v: Expectation(
            message="a non-null value",
            value=v,
            code=ExpectationCodes.TYPE_MISMATCH,
            data={"expected": "not None", "found": "NoneType"},
        ),
    )
    return _coercion(not_null, _str_from, "str", child, message)


def _datetime_from(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = value.strip()
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def to_datetime(child: Validator = VALID, message: str | None = None) -> Validator:
    """Parse date strings (ISO 8601 and common formats) into ``datetime``."""
    return _coercion(
        any_of([is_type(date, name="date"), IS_STRING]), _datetime_from, "datetime", child, message
    )


def _date_only_from(value: Any) -> datetime:
    return _datetime_from(value).replace(hour=0, minute=0, second=0, microsecond=0)


def to_date_only(child: Validator = VALID, message: str | None = None) -> Validator:
    """Like ``to_datetime`` but truncated to midnight."""
    return _coercion(
        any_of([is_type(date, name="date"), IS_STRING]), _date_only_from, "date", child, message
    )


def _json_from(value: Any) -> Any:
    if isinstance(value, str):
        return json.loads(value)
    return value


def to_json(child: Validator = VALID, message: str | None = None) -> Validator:
    """Decode a JSON string; dicts and lists pass through unchanged."""
    return _coercion(any_of([IS_STRING, IS_MAP, IS_LIST]), _json_from, "json", child, message)


def _string_op(fn: Callable[[str], str], name: str) -> Callable[[Validator], Validator]:
    def build(child: Validator = VALID) -> Validator:
        return _coercion(IS_STRING, fn, name, child, None)

    return build


trim = _string_op(str.strip, "trimmed string")
to_lower = _string_op(str.lower, "lowercase string")
to_upper = _string_op(str.upper, "uppercase string")
collapse_whitespace = _string_op(lambda s: re.sub(r"\s+", " ", s).strip(), "collapsed string")


def split(separator: str, child: Validator = VALID, message: str | None = None) -> Validator:
    """Split a string on ``separator`` and validate the list of parts.

    Example:
        ```python
        ports = split(",", list_each(to_int(is_gte(0))))
        ports.validate("80,443").value   # ["80", "443"]
        ```
    """
    return _coercion(IS_STRING, lambda text: text.split(separator), "list", child, message)


def pick_keys(keys: Iterable[str], child: Validator = VALID) -> Validator:
    """Keep only ``keys`` (those present) of a mapping."""
    wanted = list(keys)

    def pick(value: Any) -> Any:
        if not isinstance(value, Mapping):
            return _MISSING
        return {k: value[k] for k in wanted if k in value}

    return pivot_value(pick, child, f"a dict containing keys: {', '.join(wanted)}")


def pluck_key(key: str, child: Validator = VALID) -> Validator:
    """Replace a mapping with the value stored under ``key``."""

    def pluck(value: Any) -> Any:
        if not isinstance(value, Mapping) or key not in value:
            return _MISSING
        return value[key]

    return pivot_value(pluck, child, f"a dict containing key: {key}")


def flatten_keys(delimiter: str = ".", child: Validator = VALID) -> Validator:
    """Flatten nested mappings into one level, joining keys with ``delimiter``."""

    def flatten(value: Any) -> Any:
        if not isinstance(value, Mapping):
            return _MISSING
        flat: dict[str, Any] = {}

        def walk(node: Mapping[str, Any], prefix: str) -> None:
            for k, item in node.items():
                path = f"{prefix}{delimiter}{k}" if prefix else str(k)
                if isinstance(item, Mapping):
                    walk(item, path)
                else:
                    flat[path] = item

        walk(value, "")
        return flat

    return pivot_value(flatten, child, "a dict that can be flattened")


def get_field(key: str, child: Validator) -> Validator:
    """Validate ``value[key]`` with ``child``.

    Unlike ``pluck_key``, failures are reported under the field's path
    (``.key``) and carry the whole map as the result value.
    """

    def check(value: Mapping[str, Any]) -> Outcome:
        def settle(result: Result) -> Result:
            if result.is_valid:
                return result
            return Result.failure(
                value, [exp.with_path_prefix(f".{key}") for exp in result.expectations]
            )

        return then(child.evaluate(value[key]), settle)

    return IS_MAP & contains_key(key) & FunctionValidator(check, name=f"get_field({key})")
