"""Structural validators for maps and lists.

Field and item failures are collected (never short-circuited) and each
expectation gets the location prepended to its path, so nested failures
read as ``.user.address[0].zip``.

Example:
    ```python
    from eskema.structure import eskema, list_each
    from eskema.predicates import IS_INT, IS_STRING

    user = eskema({"name": IS_STRING, "tags": list_each(IS_STRING)})
    result = user.validate({"name": "ada", "tags": ["x", 3]})
    result.first_expectation.description  # '.tags[1]: str'
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from typing import Any

from .expectation import Expectation, ExpectationCodes
from .predicates import IS_LIST, IS_MAP, is_eq, length
from .result import Result
from .validator import (
    ContextualValidator,
    FunctionValidator,
    Outcome,
    Pending,
    Validator,
    is_pending,
)

Step = tuple[str, Callable[[], Outcome]]


def _collect(
    result: Result,
    segment: str,
    errors: list[Expectation],
    message: str | None,
    default_code: str,
) -> None:
    for exp in result.expectations:
        errors.append(
            exp.copy_with(
                message=message or exp.message,
                code=exp.code or default_code,
            ).with_path_prefix(segment)
        )


def _run_steps(
    value: Any,
    steps: Iterator[Step],
    message: str | None,
    default_code: str,
) -> Outcome:
    """Run every step in order, collecting failures under each step's segment."""
    errors: list[Expectation] = []
    for segment, run in steps:
        outcome = run()
        if is_pending(outcome):
            return Pending(
                _resume_steps(value, outcome, segment, steps, errors, message, default_code),
                outcome,
            )
        _collect(outcome, segment, errors, message, default_code)
    return _settle(value, errors)


async def _resume_steps(
    value: Any,
    pending: Any,
    segment: str,
    steps: Iterator[Step],
    errors: list[Expectation],
    message: str | None,
    default_code: str,
) -> Result:
    _collect(await pending, segment, errors, message, default_code)
    for segment, run in steps:
        outcome = run()
        result = await outcome if is_pending(outcome) else outcome
        _collect(result, segment, errors, message, default_code)
    return _settle(value, errors)


def _settle(value: Any, errors: list[Expectation]) -> Result:
    if errors:
        return Result.failure(value, errors)
    return Result.success(value)


def _field_outcome(validator: Validator, parent: Mapping[str, Any], key: str) -> Outcome:
    exists = key in parent
    field_value = parent.get(key)
    if isinstance(validator, ContextualValidator):
        return validator.evaluate_with_parent(field_value, parent, exists=exists)
    return validator.evaluate(field_value, exists=exists)


def eskema(schema: Mapping[str, Validator], message: str | None = None) -> Validator:
    """Validate a map field by field.

    Fields are visited in declaration order. A missing key is evaluated with
    ``exists=False`` so optional validators accept it and nullable ones do
    not. Keys not declared in ``schema`` are ignored.

    Args:
        schema: Mapping of key to field validator
        message: Replace every field failure's message with this one

    Returns:
        Map validator whose valid result carries the input map
    """
    fields = dict(schema)

    def check_fields(value: Mapping[str, Any]) -> Outcome:
        steps = (
            (f".{key}", lambda key=key, v=v: _field_outcome(v, value, key))
            for key, v in fields.items()
        )
        return _run_steps(value, steps, message, ExpectationCodes.STRUCTURE_MAP_FIELD_FAILED)

    return IS_MAP & FunctionValidator(check_fields, name="eskema")


def eskema_strict(schema: Mapping[str, Validator], message: str | None = None) -> Validator:
    """Like ``eskema()`` but undeclared keys are a failure."""
    declared = set(schema)

    def check_unknown(value: Mapping[str, Any]) -> Result:
        unknown = [key for key in value if key not in declared]
        if not unknown:
            return Result.success(value)
        return Result.failure(
            value,
            expectation=Expectation(
                message=message or f"has unknown keys: {', '.join(map(str, unknown))}",
                value=value,
                code=ExpectationCodes.STRUCTURE_UNKNOWN_KEY,
                data={"keys": unknown},
            ),
        )

    return eskema(schema) & FunctionValidator(check_unknown, name="unknown_keys")


def _item_outcome(validator: Validator, item: Any) -> Outcome:
    if item is None and validator.is_nullable:
        return Result.success(item)
    return validator.evaluate(item)


def _check_items(
    items: Sequence[Any],
    validator_at: Callable[[int], Validator],
    message: str | None,
) -> Outcome:
    steps = (
        (f"[{index}]", lambda index=index, item=item: _item_outcome(validator_at(index), item))
        for index, item in enumerate(items)
    )
    return _run_steps(items, steps, message, ExpectationCodes.STRUCTURE_LIST_ITEM_FAILED)


def eskema_list(validators: Iterable[Validator]) -> Validator:
    """Validate a fixed-length list positionally.

    The value must be a list with exactly one element per validator;
    element ``i`` is validated by ``validators[i]``.
    """
    positional = list(validators)
    return (
        IS_LIST
        & length([is_eq(len(positional))])
        & FunctionValidator(
            lambda items: _check_items(items, positional.__getitem__, None),
            name="eskema_list",
        )
    )


def list_each(validator: Validator, message: str | None = None) -> Validator:
    """Validate every element of a list with ``validator``.

    Args:
        validator: Item validator; if nullable, ``None`` items are accepted
        message: Replace every item failure's message with this one

    Returns:
        List validator
    """
    return IS_LIST & FunctionValidator(
        lambda items: _check_items(items, lambda _: validator, message),
        name="list_each",
    )
