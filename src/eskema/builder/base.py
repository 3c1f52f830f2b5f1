"""Behaviour shared by every typed builder."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from .. import transformers as tr
from ..combinators import not_, with_expectation
from ..expectation import Expectation
from ..predicates import is_eq, is_one_of
from ..result import Result
from ..validator import Validator
from .chain import Chain

B = TypeVar("B", bound="BaseBuilder")


class BaseBuilder:
    """Fluent accumulator of constraints.

    Every chain method mutates the builder and returns it (or a builder of
    another type sharing the same chain, after a coercion). ``build()``
    produces the immutable validator.

    Example:
        ```python
        name = v().string().trim().min_length(2).error("name too short").build()
        not_blank = v().string().not_.empty().build()
        ```
    """

    def __init__(
        self,
        chain: Chain | None = None,
        nullable: bool = False,
        optional: bool = False,
    ):
        self.chain = chain if chain is not None else Chain()
        self._negated = False
        self._nullable = nullable
        self._optional = optional

    def _become(self, builder_cls: type[B]) -> B:
        """Continue the same chain with another typed builder."""
        if isinstance(self, builder_cls):
            return self
        return builder_cls(chain=self.chain, nullable=self._nullable, optional=self._optional)

    def _take_negation(self) -> bool:
        negated, self._negated = self._negated, False
        return negated

    @staticmethod
    def _decorate(validator: Validator, negated: bool, message: str | None) -> Validator:
        if negated:
            validator = not_(validator)
        if message:
            validator = with_expectation(validator, Expectation(message=message))
        return validator

    @property
    def not_(self: B) -> B:
        """Negate the next constraint added to the chain."""
        self._negated = True
        return self

    def add(self: B, validator: Validator, message: str | None = None) -> B:
        """Append ``validator`` to the chain."""
        self.chain.add(self._decorate(validator, self._take_negation(), message))
        return self

    def wrap(
        self: B, fn: Callable[[Validator], Validator], message: str | None = None
    ) -> B:
        """Replace the current constraints with ``fn(current)``."""
        negated = self._take_negation()
        self.chain.wrap(lambda current: self._decorate(fn(current), negated, message))
        return self

    def error(self: B, message: str) -> B:
        """Override the failure message of the constraints so far (codes are kept)."""
        return self.wrap(lambda current: with_expectation(current, Expectation(message=message)))

    def default_to(self: B, default: Any) -> B:
        """Substitute ``default`` for ``None`` before the constraints so far."""
        return self.wrap(lambda current: tr.default_to(default, current))

    def one_of(self: B, values: Iterable[Any], message: str | None = None) -> B:
        return self.add(is_one_of(values), message=message)

    def eq(self: B, value: Any, message: str | None = None) -> B:
        return self.add(is_eq(value), message=message)

    def nullable(self: B) -> B:
        self._nullable = True
        return self

    def optional(self: B) -> B:
        self._optional = True
        return self

    def collect_all(self: B) -> B:
        """Report every failing constraint instead of stopping at the first."""
        self.chain.collecting = True
        return self

    def build(self) -> Validator:
        """Freeze the chain into a validator carrying the builder's flags."""
        return self.chain.build().copy_with(nullable=self._nullable, optional=self._optional)

    def validate(self, value: Any, exists: bool = True) -> Result:
        """Shortcut for ``build().validate(value)``."""
        return self.build().validate(value, exists)

    async def validate_async(self, value: Any, exists: bool = True) -> Result:
        """Shortcut for ``build().validate_async(value)``."""
        return await self.build().validate_async(value, exists)

    def __repr__(self) -> str:
        kind = self.chain.coercion.kind.value if self.chain.coercion else None
        return f"{type(self).__name__}(coercion={kind})"
