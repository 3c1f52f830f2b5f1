"""Validation result type with consistent, predictable behavior.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from .expectation import Expectation
from .formatting import pretty_value


@dataclass(frozen=True)
class Result:
    """Outcome of a single validation call.

    A result is valid exactly when it carries no expectations; validity is
    derived rather than stored, so the two can never disagree. Build results
    with ``Result.success()`` and ``Result.failure()``.

    Attributes:
        value: The (possibly coerced) value
        expectations: Ordered failures, empty for a valid result
        original_value: The input before any transformation, when known
    """

    value: Any
    expectations: tuple[Expectation, ...] = field(default_factory=tuple)
    original_value: Any = None

    @property
    def is_valid(self) -> bool:
        return not self.expectations

    @property
    def is_not_valid(self) -> bool:
        return bool(self.expectations)

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.is_valid

    @property
    def expectation_count(self) -> int:
        return len(self.expectations)

    @property
    def first_expectation(self) -> Expectation:
        """The first failure.

        Raises:
            IndexError: If the result is valid
        """
        if not self.expectations:
            raise IndexError("A valid result has no expectations")
        return self.expectations[0]

    @classmethod
    def success(cls, value: Any, original_value: Any = None) -> Result:
        """Create a successful validation result.

        Args:
            value: The validated value
            original_value: Input value before transformations

        Returns:
            Successful Result
        """
        return cls(value=value, expectations=(), original_value=original_value)

    @classmethod
    def failure(
        cls,
        value: Any,
        expectations: Iterable[Expectation] | None = None,
        expectation: Expectation | None = None,
        original_value: Any = None,
    ) -> Result:
        """Create a failed validation result.

        Args:
            value: The value that failed validation
            expectations: Failures to report
            expectation: Single failure, appended after ``expectations``
            original_value: Input value before transformations

        Returns:
            Failed Result

        Raises:
            ValueError: If no expectation is provided
        """
        collected = tuple(expectations or ())
        if expectation is not None:
            collected = collected + (expectation,)
        if not collected:
            raise ValueError("A failed result needs at least one expectation")
        return cls(value=value, expectations=collected, original_value=original_value)

    def merge(self, other: Result) -> Result:
        """Combine results for composite validation.

        Args:
            other: Another Result to merge with this one

        Returns:
            New Result, invalid if either side is invalid
        """
        return Result(
            value=other.value if other.is_valid else self.value,
            expectations=self.expectations + other.expectations,
            original_value=self.original_value,
        )

    def with_expectations(
        self, fn: Callable[[Expectation], Expectation]
    ) -> Result:
        """Return a copy with every expectation rewritten by ``fn``."""
        return Result(
            value=self.value,
            expectations=tuple(fn(e) for e in self.expectations),
            original_value=self.original_value,
        )

    @property
    def short_description(self) -> str:
        if self.is_valid:
            return "Valid"
        return ", ".join(e.description for e in self.expectations)

    @property
    def description(self) -> str:
        if self.is_valid:
            return f"Valid: {pretty_value(self.value)}"
        return f"{self.short_description} (value: {pretty_value(self.value)})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.is_valid,
            "value": self.value,
            "expectations": [e.to_dict() for e in self.expectations],
        }

    def __str__(self) -> str:
        return self.description
