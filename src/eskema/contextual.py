"""Validators whose decision depends on the enclosing map.

``when`` and ``resolve`` only work as fields of an ``eskema()`` schema,
which hands them the parent map. Evaluated on their own they return a
``logic.when_outside_schema`` failure rather than raising.

Example:
    ```python
    from eskema import eskema, when, IS_STRING, IS_NULL
    from eskema.predicates import is_eq

    payment = eskema({
        "method": IS_STRING,
        "card_number": when(
            eskema({"method": is_eq("card")}),
            then=IS_STRING,
            otherwise=IS_NULL,
        ),
    })
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .expectation import Expectation, ExpectationCodes
from .predicates import IS_MAP, contains_key
from .presence import optional, required
from .result import Result
from .validator import ContextualValidator, FunctionValidator, Outcome, Validator, then


class When(ContextualValidator):
    """Pick ``then_`` or ``otherwise`` by validating the parent map.

    Args:
        condition: Validated against the parent map, not the field value
        then_: Validates the field when the condition passes
        otherwise: Validates the field when the condition fails
        message: Replace the branch failure with this message
    """

    usage_name = "when"

    def __init__(
        self,
        condition: Validator,
        then_: Validator,
        otherwise: Validator,
        message: str | None = None,
        nullable: bool = False,
        optional: bool = False,
    ):
        super().__init__(nullable=nullable, optional=optional)
        self.condition = condition
        self.then_ = then_
        self.otherwise = otherwise
        self.message = message

    def check_with_parent(
        self, value: Any, parent: Mapping[str, Any], exists: bool = True
    ) -> Outcome:
        def branch(condition_result: Result) -> Outcome:
            chosen = self.then_ if condition_result.is_valid else self.otherwise
            return then(chosen.evaluate(value, exists), lambda r: self._apply_message(r, value))

        return then(self.condition.evaluate(parent), branch)

    def _apply_message(self, result: Result, value: Any) -> Result:
        if result.is_valid or not self.message:
            return result
        return Result.failure(
            value,
            expectation=Expectation(
                message=self.message, value=value, code=result.first_expectation.code
            ),
        )

    def __repr__(self) -> str:
        return f"When({self.condition!r}){self._flags_repr()}"


class Resolve(ContextualValidator):
    """Let a function choose the field validator from the parent map.

    A resolver returning ``None`` means the field is accepted as is.
    """

    usage_name = "resolve"

    def __init__(
        self,
        resolver: Callable[[Mapping[str, Any]], Validator | None],
        nullable: bool = False,
        optional: bool = False,
    ):
        super().__init__(nullable=nullable, optional=optional)
        self.resolver = resolver

    def check_with_parent(
        self, value: Any, parent: Mapping[str, Any], exists: bool = True
    ) -> Outcome:
        chosen = self.resolver(parent)
        if chosen is None:
            return Result.success(value)
        return chosen.evaluate(value, exists)


def when(
    condition: Validator,
    then: Validator,
    otherwise: Validator,
    message: str | None = None,
) -> When:
    """Conditional field validator, see ``When``."""
    return When(condition, then, otherwise, message=message)


def resolve(resolver: Callable[[Mapping[str, Any]], Validator | None]) -> Resolve:
    """Field validator chosen at validation time from the parent map."""
    return Resolve(resolver)


def required_when(
    condition: Validator,
    validator: Validator,
    message: str | None = None,
) -> When:
    """Require the field when ``condition`` holds, otherwise make it optional.

    Args:
        condition: Validated against the parent map
        validator: Field validator applied in both cases when the key is present
        message: Replace the branch failure with this message

    Returns:
        Contextual field validator
    """
    return When(condition, required(validator), optional(validator), message=message)


def switch_by(key: str, cases: Mapping[Any, Validator]) -> Validator:
    """Validate a whole map with the case selected by ``map[key]``.

    Example:
        ```python
        party = switch_by("type", {
            "business": eskema({"tax_id": IS_STRING}),
            "person": eskema({"name": IS_STRING}),
        })
        ```

    Args:
        key: Discriminator key
        cases: Validator per discriminator value

    Returns:
        Map validator; unknown discriminator values fail with ``logic.none_matched``
    """
    options = dict(cases)

    def dispatch(value: Mapping[str, Any]) -> Outcome:
        discriminator = value[key]
        try:
            chosen = options.get(discriminator)
        except TypeError:
            chosen = None
        if chosen is None:
            return Result.failure(
                value,
                expectation=Expectation(
                    message="unknown type",
                    value=value,
                    path=f".{key}",
                    code=ExpectationCodes.LOGIC_NONE_MATCHED,
                    data={"key": key, "found": discriminator, "options": list(options)},
                ),
            )
        return then(
            chosen.evaluate(value),
            lambda r: Result.success(value) if r.is_valid else r,
        )

    return (
        IS_MAP
        & contains_key(key, message=f'Missing key: "{key}"')
        & FunctionValidator(dispatch, name=f"switch_by({key})")
    )
