"""Accumulator behind the fluent builder.

A chain holds, in evaluation order:

1. an optional prefix that pivots the value (``pluck_value``),
2. pre-coercion constraints, checked against the incoming type,
3. at most one coercion,
4. post-coercion constraints, checked against the coerced value.

Installing a coercion discards the pre constraints unless asked to keep
them. A second built-in coercion of the same kind is expected to be skipped
by the caller; a different built-in kind replaces the first and discards the
post constraints; a custom coercion composes with whatever is installed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from ..combinators import all_of
from ..exceptions import BuilderError
from ..transformers import pluck_key
from ..validator import VALID, Validator

logger = logging.getLogger(__name__)

Transformer = Callable[[Validator], Validator]
"""Wraps a child validator so that it receives a transformed value."""


class CoercionKind(Enum):
    """Target type of the chain's single coercion."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    DATETIME = "datetime"
    JSON = "json"
    CUSTOM = "custom"


@dataclass(frozen=True)
class CoercionContext:
    """The installed coercion.

    Attributes:
        kind: Coercion kind, used for same-kind detection
        transformer: Wraps the post constraints
        preserve_pre: Keep the pre constraints and run them before the coercion
    """

    kind: CoercionKind
    transformer: Transformer
    preserve_pre: bool = False


@dataclass(frozen=True)
class CustomPivot:
    """User-defined coercion for ``use()``.

    Example:
        ```python
        as_text = CustomPivot(lambda child: transform(str, child), kind="text")
        v().type_(object).use(as_text).add(is_eq("42")).build()
        ```

    Attributes:
        transformer: Wraps the child validator built from later constraints
        drop_pre: Discard the constraints added before the pivot
        kind: Free-form label, for debugging only
    """

    transformer: Transformer
    drop_pre: bool = True
    kind: str | None = None


class Chain:
    """Single-owner, mutable accumulator consumed by ``build()``."""

    def __init__(self) -> None:
        self.pre: list[Validator] = []
        self.post: list[Validator] = []
        self.prefix: Transformer | None = None
        self.coercion: CoercionContext | None = None
        self.collecting = False

    @property
    def has_coercion(self) -> bool:
        return self.coercion is not None

    def is_kind(self, kind: CoercionKind) -> bool:
        return self.coercion is not None and self.coercion.kind is kind

    def _active(self) -> list[Validator]:
        return self.post if self.coercion is not None else self.pre

    def _join(self, validators: list[Validator]) -> Validator:
        if not validators:
            return VALID
        if len(validators) == 1:
            return validators[0]
        return all_of(validators, collecting=self.collecting)

    def add(self, validator: Validator) -> None:
        """Append a constraint to the pre or post list, whichever is active."""
        self._active().append(validator)

    def wrap(self, fn: Callable[[Validator], Validator]) -> None:
        """Replace the active constraints with ``fn`` applied to their conjunction.

        Right after a coercion, with no post constraints yet, the coercion
        itself is wrapped instead.
        """
        active = self._active()
        if active or self.coercion is None:
            active[:] = [fn(self._join(active))]
        else:
            previous = self.coercion.transformer
            self.coercion = replace(self.coercion, transformer=lambda child: fn(previous(child)))

    def set_coercion(
        self,
        kind: CoercionKind,
        transformer: Transformer,
        drop_pre: bool = True,
    ) -> None:
        """Install, replace or compose the chain's coercion.

        Args:
            kind: Kind of the new coercion
            transformer: Wraps the post constraints
            drop_pre: Discard the pre constraints (built-in kinds only)
        """
        current = self.coercion
        if current is not None and CoercionKind.CUSTOM in (kind, current.kind):
            previous = current.transformer
            self.coercion = CoercionContext(
                kind,
                lambda child: previous(transformer(child)),
                preserve_pre=current.preserve_pre,
            )
            logger.debug(f"Composed {kind.value} coercion after {current.kind.value}")
        else:
            self.coercion = CoercionContext(kind, transformer, preserve_pre=not drop_pre)
            if drop_pre:
                self.pre.clear()
            if current is None:
                logger.debug(f"Installed {kind.value} coercion")
            else:
                logger.debug(f"Replaced {current.kind.value} coercion with {kind.value}")
        self.post.clear()

    def pluck(self, key: str) -> None:
        """Pivot the value to ``value[key]`` before the rest of the chain.

        Constraints added so far keep validating the unplucked value.

        Raises:
            BuilderError: If a coercion is already installed
        """
        if self.coercion is not None:
            raise BuilderError(
                f"Cannot pluck '{key}' after a {self.coercion.kind.value} coercion",
                context={"key": key, "coercion": self.coercion.kind.value},
            )
        hoisted = list(self.pre)
        self.pre.clear()

        def pivot(child: Validator) -> Validator:
            return all_of([*hoisted, pluck_key(key, child)])

        existing = self.prefix
        self.prefix = pivot if existing is None else (lambda child: existing(pivot(child)))

    def build(self) -> Validator:
        """Compose prefix, pre constraints, coercion and post constraints."""
        if self.coercion is None:
            core = self._join(self.pre)
        else:
            core = self.coercion.transformer(self._join(self.post))
            if self.coercion.preserve_pre and self.pre:
                core = all_of([self._join(self.pre), core])
        return self.prefix(core) if self.prefix is not None else core
