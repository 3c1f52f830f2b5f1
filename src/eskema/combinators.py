"""Logical combinators: conjunction, disjunction, "none of" and negation.

Every combinator is itself a ``Validator``. Children run strictly in order;
if a child turns out to be asynchronous the combinator hands back an
awaitable that resumes with the remaining children, so the short-circuit
and collection rules are the same for sync and async chains.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .exceptions import ValidatorFailedError
from .expectation import Expectation, ExpectationCodes
from .result import Result
from .validator import Outcome, Pending, Validator, is_pending, then

logger = logging.getLogger(__name__)


def _override(result: Result, message: str) -> Result:
    """Replace a failure's expectations with a single custom message."""
    code = result.first_expectation.code if result.expectations else None
    return Result.failure(
        result.value,
        expectation=Expectation(message=message, value=result.value, code=code),
        original_value=result.original_value,
    )


def _negated(
    child: Validator, expectations: Iterable[Expectation], value: Any
) -> list[Expectation]:
    """Rewrite expectations as "not <message>" for the given value."""
    source = list(expectations)
    if not source:
        describe = getattr(child, "describe", None)
        if describe is not None:
            source = [describe(value)]
        else:
            source = [
                Expectation(
                    message="passed", value=value, code=ExpectationCodes.LOGIC_NOT_EXPECTED
                )
            ]
    return [
        exp.copy_with(
            message=f"not {exp.message}",
            value=value,
            code=exp.code or ExpectationCodes.LOGIC_NOT_EXPECTED,
        )
        for exp in source
    ]


@dataclass(frozen=True)
class _Mode:
    """How a multi-child combinator walks its children."""

    chains_values: bool


@dataclass
class _Fold:
    """Mutable accumulator for a single evaluation."""

    current: Any
    expectations: list[Expectation] = field(default_factory=list)


class MultiValidator(Validator):
    """Base class for combinators over an ordered list of children.

    Subclasses decide, per child result, whether to stop early
    (``_step``) and how to build the final result (``_finish``).
    """

    mode: ClassVar[_Mode] = _Mode(chains_values=False)

    def __init__(
        self,
        validators: Iterable[Validator],
        message: str | None = None,
        nullable: bool = False,
        optional: bool = False,
    ):
        super().__init__(nullable=nullable, optional=optional)
        self.validators: tuple[Validator, ...] = tuple(validators)
        self.message = message

    @property
    def is_plain(self) -> bool:
        """True when this combinator can be flattened into a sibling."""
        return self.message is None and not self._nullable and not self._optional

    def _chains_values(self) -> bool:
        return self.mode.chains_values

    def check(self, value: Any) -> Outcome:
        fold = _Fold(current=value)
        chains = self._chains_values()
        for index, child in enumerate(self.validators):
            input_value = fold.current if chains else value
            outcome = child.evaluate(input_value)
            if is_pending(outcome):
                return Pending(
                    self._resume(outcome, child, input_value, index + 1, value, fold), outcome
                )
            stop = self._step(child, outcome, input_value, fold)
            if stop is not None:
                return stop
        return self._finish(value, fold)

    async def _resume(
        self,
        pending: Any,
        pending_child: Validator,
        input_value: Any,
        next_index: int,
        value: Any,
        fold: _Fold,
    ) -> Result:
        stop = self._step(pending_child, await pending, input_value, fold)
        if stop is not None:
            return stop

        chains = self._chains_values()
        for child in self.validators[next_index:]:
            input_value = fold.current if chains else value
            outcome = child.evaluate(input_value)
            result = await outcome if is_pending(outcome) else outcome
            stop = self._step(child, result, input_value, fold)
            if stop is not None:
                return stop
        return self._finish(value, fold)

    @abstractmethod
    def _step(
        self, child: Validator, result: Result, input_value: Any, fold: _Fold
    ) -> Result | None:
        """Fold one child result; return a Result to stop early."""

    @abstractmethod
    def _finish(self, value: Any, fold: _Fold) -> Result:
        """Build the result once every child has run."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self.validators)}){self._flags_repr()}"


class All(MultiValidator):
    """All children must pass (AND logic).

    In the default mode the first failure is returned immediately and every
    child receives the value produced by the previous one, so ``All`` doubles
    as a transformation pipeline. With ``collecting=True`` every child runs
    against the original value and all failures are merged.
    """

    def __init__(
        self,
        validators: Iterable[Validator],
        message: str | None = None,
        collecting: bool = False,
        nullable: bool = False,
        optional: bool = False,
    ):
        super().__init__(validators, message=message, nullable=nullable, optional=optional)
        self.collecting = collecting

    @property
    def is_plain(self) -> bool:
        return super().is_plain and not self.collecting

    def _chains_values(self) -> bool:
        return not self.collecting

    def _step(
        self, child: Validator, result: Result, input_value: Any, fold: _Fold
    ) -> Result | None:
        if result.is_valid:
            if not self.collecting:
                fold.current = result.value
            return None
        if self.collecting:
            fold.expectations.extend(result.expectations)
            return None
        return _override(result, self.message) if self.message else result

    def _finish(self, value: Any, fold: _Fold) -> Result:
        if fold.expectations:
            failed = Result.failure(value, fold.expectations, original_value=value)
            return _override(failed, self.message) if self.message else failed
        return Result.success(fold.current, original_value=value)


class AnyOf(MultiValidator):
    """At least one child must pass (OR logic).

    Returns the first valid child result. When every child fails, the
    failure lists all children's expectations. No children means failure.
    """

    def _step(
        self, child: Validator, result: Result, input_value: Any, fold: _Fold
    ) -> Result | None:
        if result.is_valid:
            return result
        fold.expectations.extend(result.expectations)
        return None

    def _finish(self, value: Any, fold: _Fold) -> Result:
        expectations = fold.expectations or [
            Expectation(
                message="at least one validator to pass",
                value=value,
                code=ExpectationCodes.LOGIC_NONE_MATCHED,
            )
        ]
        failed = Result.failure(value, expectations, original_value=value)
        return _override(failed, self.message) if self.message else failed


class NoneOf(MultiValidator):
    """Every child must fail.

    Each child that passes contributes its expectations rewritten as
    "not <message>", explaining what the value should not have matched.
    """

    def _step(
        self, child: Validator, result: Result, input_value: Any, fold: _Fold
    ) -> Result | None:
        if result.is_valid:
            fold.expectations.extend(_negated(child, result.expectations, input_value))
        return None

    def _finish(self, value: Any, fold: _Fold) -> Result:
        if fold.expectations:
            failed = Result.failure(value, fold.expectations, original_value=value)
            return _override(failed, self.message) if self.message else failed
        return Result.success(value, original_value=value)


class Not(Validator):
    """Negates a validator."""

    def __init__(
        self,
        child: Validator,
        message: str | None = None,
        nullable: bool = False,
        optional: bool = False,
    ):
        super().__init__(nullable=nullable, optional=optional)
        self.child = child
        self.message = message

    def check(self, value: Any) -> Outcome:
        return then(self.child.evaluate(value), lambda result: self._negate(result, value))

    def _negate(self, result: Result, value: Any) -> Result:
        if result.is_not_valid:
            return Result.success(value)
        if self.message:
            code = result.expectations[0].code if result.expectations else None
            return Result.failure(
                value,
                expectation=Expectation(
                    message=self.message,
                    value=value,
                    code=code or ExpectationCodes.LOGIC_NOT_EXPECTED,
                ),
            )
        return Result.failure(value, _negated(self.child, result.expectations, value))

    def __repr__(self) -> str:
        return f"Not({self.child!r}){self._flags_repr()}"


class WithExpectation(Validator):
    """Replaces a child's failure with a fixed expectation.

    The child's ``code`` is carried over when the override has none of its
    own, so programmatic handling keeps working after a message override.
    """

    def __init__(
        self,
        child: Validator,
        expectation: Expectation,
        nullable: bool = False,
        optional: bool = False,
    ):
        super().__init__(nullable=nullable, optional=optional)
        self.child = child
        self.expectation = expectation

    def check(self, value: Any) -> Outcome:
        return then(self.child.evaluate(value), lambda result: self._apply(result, value))

    def _apply(self, result: Result, value: Any) -> Result:
        if result.is_valid:
            return result
        child_code = result.first_expectation.code
        return Result.failure(
            result.value,
            expectation=self.expectation.copy_with(
                value=value,
                code=child_code or self.expectation.code,
            ),
            original_value=value,
        )


class ThrowInstead(Validator):
    """Raises ``ValidatorFailedError`` instead of returning a failure."""

    def __init__(self, child: Validator):
        super().__init__(nullable=child.is_nullable, optional=child.is_optional)
        self.child = child

    def check(self, value: Any) -> Outcome:
        return then(self.child.evaluate(value), self._raise_on_failure)

    @staticmethod
    def _raise_on_failure(result: Result) -> Result:
        if result.is_not_valid:
            error = ValidatorFailedError(result)
            logger.debug(error.summary)
            raise error
        return Result.success(result.value)


def all_of(
    validators: Iterable[Validator],
    message: str | None = None,
    collecting: bool = False,
) -> All:
    """Pass if every validator passes.

    Args:
        validators: Children, evaluated in order
        message: Replace failure expectations with this message
        collecting: Run every child against the original value and report
            all failures instead of stopping at the first one

    Returns:
        Conjunction validator
    """
    return All(validators, message=message, collecting=collecting)


def any_of(validators: Iterable[Validator], message: str | None = None) -> AnyOf:
    """Pass if at least one validator passes."""
    return AnyOf(validators, message=message)


def none_of(validators: Iterable[Validator], message: str | None = None) -> NoneOf:
    """Pass if none of the validators pass."""
    return NoneOf(validators, message=message)


def not_(validator: Validator, message: str | None = None) -> Not:
    """Pass if ``validator`` fails."""
    return Not(validator, message=message)


def with_expectation(validator: Validator, expectation: Expectation) -> WithExpectation:
    """Report ``expectation`` whenever ``validator`` fails."""
    return WithExpectation(validator, expectation)


def throw_instead(validator: Validator) -> ThrowInstead:
    """Raise ``ValidatorFailedError`` instead of returning an invalid result."""
    return ThrowInstead(validator)
