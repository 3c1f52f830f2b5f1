"""Validator contract shared by every constraint, combinator and schema.

A validator is an immutable function from a value to a ``Result``. Any
validator may be backed by an ``async def``; in that case its raw outcome is
an awaitable instead of a ``Result``. ``validate()`` refuses such chains with
``AsyncValidatorError`` while ``validate_async()`` always works.

Example:
    ```python
    from eskema.validator import validator
    from eskema.expectation import Expectation

    is_even = validator(
        lambda value: isinstance(value, int) and value % 2 == 0,
        lambda value: Expectation(message="an even integer", value=value),
    )
    is_even.validate(4).is_valid   # True
    is_even.nullable().validate(None).is_valid  # True
    ```
"""

from __future__ import annotations

import copy
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Coroutine, Generator, Mapping
from typing import TYPE_CHECKING, Any, Union

from .exceptions import AsyncValidatorError, ValidatorFailedError
from .expectation import Expectation, ExpectationCodes
from .result import Result

if TYPE_CHECKING:
    from .combinators import All, AnyOf, Not

logger = logging.getLogger(__name__)

Outcome = Union[Result, Awaitable[Result]]
"""What a raw check returns: a Result, or an awaitable resolving to one."""


def is_pending(outcome: Any) -> bool:
    """True if ``outcome`` still has to be awaited."""
    return inspect.isawaitable(outcome)


class Pending:
    """Awaitable outcome that owns the outcome it resumes from.

    A resume coroutine that was never started cannot close the awaitable it
    holds, so ``close()`` closes both. Once awaited, the coroutine takes over
    ``inner`` itself.

    Args:
        resume: Coroutine producing the final Result
        inner: Pending outcome ``resume`` will await first
    """

    __slots__ = ("_resume", "_inner")

    def __init__(self, resume: Coroutine[Any, Any, Any], inner: Any = None):
        self._resume = resume
        self._inner = inner

    def __await__(self) -> Generator[Any, None, Any]:
        self._inner = None
        return self._resume.__await__()

    def close(self) -> None:
        self._resume.close()
        inner, self._inner = self._inner, None
        discard(inner)


def then(outcome: Any, fn: Callable[[Any], Any]) -> Any:
    """Apply ``fn`` to an outcome, staying synchronous when possible.

    If ``outcome`` is already available, ``fn(outcome)`` is returned as is.
    Otherwise a ``Pending`` is returned that awaits the outcome, applies
    ``fn`` and awaits its result too if that is pending.
    """
    if not is_pending(outcome):
        return fn(outcome)

    async def resume() -> Any:
        resolved = fn(await outcome)
        if is_pending(resolved):
            resolved = await resolved
        return resolved

    return Pending(resume(), outcome)


def discard(outcome: Any) -> None:
    """Close a pending outcome, and everything it holds, without awaiting it."""
    if isinstance(outcome, Pending) or inspect.iscoroutine(outcome):
        outcome.close()


class Validator(ABC):
    """Base class for all validators with composable operators.

    Validators carry two independent flags:

    - ``is_nullable``: a ``None`` value whose key is known to be present is
      valid.
    - ``is_optional``: an absent key (``exists=False``) is valid.

    Validators never change after construction; ``copy_with()``,
    ``nullable()`` and ``optional()`` return modified copies.
    """

    def __init__(self, nullable: bool = False, optional: bool = False):
        self._nullable = nullable
        self._optional = optional

    @property
    def is_nullable(self) -> bool:
        return self._nullable

    @property
    def is_optional(self) -> bool:
        return self._optional

    @abstractmethod
    def check(self, value: Any) -> Outcome:
        """Run the raw constraint, ignoring the nullable/optional flags.

        Args:
            value: Value to validate

        Returns:
            A Result, or an awaitable resolving to one
        """

    def evaluate(self, value: Any, exists: bool = True) -> Outcome:
        """Apply the nullable/optional short-circuits, then ``check()``.

        Args:
            value: Value to validate
            exists: False when the value comes from a key that is absent

        Returns:
            A Result, or an awaitable resolving to one
        """
        if value is None and exists and self._nullable:
            return Result.success(value)
        if not exists and self._optional:
            return Result.success(value)
        return self.check(value)

    def validate(self, value: Any, exists: bool = True) -> Result:
        """Validate synchronously.

        Raises:
            AsyncValidatorError: If any participating constraint is async
        """
        outcome = self.evaluate(value, exists)
        if is_pending(outcome):
            discard(outcome)
            logger.debug(f"Async outcome reached the sync entry point of {self!r}")
            raise AsyncValidatorError(repr(self))
        return outcome

    async def validate_async(self, value: Any, exists: bool = True) -> Result:
        """Validate, awaiting any async constraint in the chain."""
        outcome = self.evaluate(value, exists)
        if is_pending(outcome):
            return await outcome
        return outcome

    def validate_or_throw(self, value: Any) -> Result:
        """Validate synchronously, raising ``ValidatorFailedError`` on failure."""
        result = self.validate(value)
        if result.is_not_valid:
            raise ValidatorFailedError(result)
        return result

    def is_valid(self, value: Any) -> bool:
        return self.validate(value).is_valid

    def is_not_valid(self, value: Any) -> bool:
        return not self.validate(value).is_valid

    async def is_valid_async(self, value: Any) -> bool:
        return (await self.validate_async(value)).is_valid

    async def is_not_valid_async(self, value: Any) -> bool:
        return not (await self.validate_async(value)).is_valid

    def copy_with(
        self, nullable: bool | None = None, optional: bool | None = None
    ) -> Validator:
        """Return a copy with the given flags replaced.

        Args:
            nullable: New nullable flag, or None to keep the current one
            optional: New optional flag, or None to keep the current one

        Returns:
            A new validator sharing this one's configuration
        """
        clone = copy.copy(self)
        clone._nullable = self._nullable if nullable is None else nullable
        clone._optional = self._optional if optional is None else optional
        return clone

    def nullable(self) -> Validator:
        return self.copy_with(nullable=True)

    def optional(self) -> Validator:
        return self.copy_with(optional=True)

    def __and__(self, other: Validator) -> All:
        """Combine with AND: both validators must pass."""
        from .combinators import All

        left = self.validators if isinstance(self, All) and self.is_plain else (self,)
        right = other.validators if isinstance(other, All) and other.is_plain else (other,)
        return All([*left, *right])

    def __or__(self, other: Validator) -> AnyOf:
        """Combine with OR: at least one validator must pass."""
        from .combinators import AnyOf

        left = self.validators if isinstance(self, AnyOf) and self.is_plain else (self,)
        right = other.validators if isinstance(other, AnyOf) and other.is_plain else (other,)
        return AnyOf([*left, *right])

    def __invert__(self) -> Not:
        """Negate this validator."""
        from .combinators import Not

        return Not(self)

    def _flags_repr(self) -> str:
        flags = [name for name, on in (("nullable", self._nullable), ("optional", self._optional)) if on]
        return f"[{', '.join(flags)}]" if flags else ""

    def __repr__(self) -> str:
        return f"{type(self).__name__}{self._flags_repr()}"


class FunctionValidator(Validator):
    """Validator backed by a callable returning a Result (sync or async).

    Args:
        fn: Callable returning a Result or an awaitable of one
        name: Name used in ``repr``
        describe: Builds the expectation this validator stands for; used to
            phrase negations ("not <message>") when the validator passes
    """

    def __init__(
        self,
        fn: Callable[[Any], Outcome],
        name: str | None = None,
        nullable: bool = False,
        optional: bool = False,
        describe: Callable[[Any], Expectation] | None = None,
    ):
        super().__init__(nullable=nullable, optional=optional)
        self.fn = fn
        self.name = name
        self.describe = describe

    def check(self, value: Any) -> Outcome:
        return self.fn(value)

    def __repr__(self) -> str:
        name = self.name or getattr(self.fn, "__name__", "fn")
        return f"FunctionValidator({name}){self._flags_repr()}"


def validator(
    predicate: Callable[[Any], bool | Awaitable[bool]],
    error: Callable[[Any], Expectation] | str,
    name: str | None = None,
) -> Validator:
    """Build a leaf validator from a boolean predicate.

    Args:
        predicate: Plain or async callable deciding validity
        error: Expectation factory called with the failing value, or a plain
            message string
        name: Optional name used in ``repr``

    Returns:
        A validator whose result keeps the input value unchanged
    """
    if isinstance(error, str):
        message = error

        def make_error(value: Any) -> Expectation:
            return Expectation(
                message=message, value=value, code=ExpectationCodes.LOGIC_PREDICATE_FAILED
            )
    else:
        make_error = error

    def run(value: Any) -> Outcome:
        return then(
            predicate(value),
            lambda ok: Result.success(value)
            if ok
            else Result.failure(value, expectation=make_error(value)),
        )

    return FunctionValidator(
        run, name=name or getattr(predicate, "__name__", None), describe=make_error
    )


VALID: Validator = FunctionValidator(Result.success, name="valid")
"""Validator that accepts every value unchanged."""


class ContextualValidator(Validator):
    """Validator that needs the enclosing map to decide.

    Map schemas hand these the parent structure through
    ``evaluate_with_parent()``. Evaluated on its own, a contextual validator
    has no parent to inspect and returns a misuse failure.
    """

    usage_name = "contextual"

    def check(self, value: Any) -> Outcome:
        return Result.failure(
            value,
            expectation=Expectation(
                message=f"`{self.usage_name}` validator can only be used inside an `eskema` map validator",
                value=value,
                code=ExpectationCodes.LOGIC_WHEN_OUTSIDE_SCHEMA,
            ),
        )

    @abstractmethod
    def check_with_parent(
        self, value: Any, parent: Mapping[str, Any], exists: bool = True
    ) -> Outcome:
        """Validate ``value`` using ``parent`` as context."""

    def evaluate_with_parent(
        self, value: Any, parent: Mapping[str, Any], exists: bool = True
    ) -> Outcome:
        if value is None and exists and self._nullable:
            return Result.success(value)
        if not exists and self._optional:
            return Result.success(value)
        return self.check_with_parent(value, parent, exists)
