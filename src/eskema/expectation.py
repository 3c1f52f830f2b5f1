"""Expectation: the structured description of one failed constraint.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .result import Result


class ExpectationCodes:
    """Stable machine-readable expectation codes.

    Codes follow a ``domain.specific_issue`` naming:
    - ``type.*``: type guards
    - ``value.*``: primitive / direct value expectations
    - ``structure.*``: map and list structural errors
    - ``logic.*``: combinator wrappers
    """

    TYPE_MISMATCH = "type.mismatch"

    VALUE_EQUAL_MISMATCH = "value.equal_mismatch"
    VALUE_MEMBERSHIP_MISMATCH = "value.membership_mismatch"
    VALUE_RANGE_OUT_OF_BOUNDS = "value.range_out_of_bounds"
    VALUE_LENGTH_OUT_OF_RANGE = "value.length_out_of_range"
    VALUE_CONTAINS_MISSING = "value.contains_missing"
    VALUE_PATTERN_MISMATCH = "value.pattern_mismatch"
    VALUE_FORMAT_INVALID = "value.format_invalid"
    VALUE_DATE_OUT_OF_RANGE = "value.date_out_of_range"
    VALUE_COERCION_FAILED = "value.coercion_failed"

    STRUCTURE_MAP_FIELD_FAILED = "structure.map_field_failed"
    STRUCTURE_UNKNOWN_KEY = "structure.unknown_key"
    STRUCTURE_LIST_ITEM_FAILED = "structure.list_item_failed"
    STRUCTURE_MISSING_KEY = "structure.missing_key"

    LOGIC_NOT_EXPECTED = "logic.not_expected"
    LOGIC_NONE_MATCHED = "logic.none_matched"
    LOGIC_WHEN_OUTSIDE_SCHEMA = "logic.when_outside_schema"
    LOGIC_PREDICATE_FAILED = "logic.predicate_failed"


@dataclass(frozen=True)
class Expectation:
    """Describes one constraint the value did not satisfy.

    Expectations are value objects: they are created per failure and only
    ever copied with overrides (for example to prepend a path segment as the
    failure propagates out of a nested structure).

    Attributes:
        message: Human-readable description of what was expected
        value: The value that failed
        path: Location inside a nested structure, e.g. ``.user[2].age``
        code: Namespaced machine-readable code, see ``ExpectationCodes``
        data: Structured context (limits, found/expected types, ...)
    """

    message: str
    value: Any = None
    path: str | None = None
    code: str | None = None
    data: Mapping[str, Any] | None = None

    def copy_with(self, **overrides: Any) -> Expectation:
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)

    def with_path_prefix(self, segment: str) -> Expectation:
        """Return a copy whose path starts with ``segment``.

        Args:
            segment: Path segment such as ``.name`` or ``[3]``

        Returns:
            Expectation with the composed path
        """
        return replace(self, path=f"{segment}{self.path or ''}")

    @property
    def description(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"message": self.message}
        if self.code is not None:
            out["code"] = self.code
        if self.path is not None:
            out["path"] = self.path
        if self.value is not None:
            out["value"] = self.value
        if self.data:
            out["data"] = dict(self.data)
        return out

    def to_result(self) -> Result:
        """Wrap this expectation in an invalid ``Result``."""
        from .result import Result

        return Result.failure(self.value, expectation=self)

    def __str__(self) -> str:
        return self.description
