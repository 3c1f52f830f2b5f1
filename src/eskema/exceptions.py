"""Exception hierarchy for eskema.

Validation failures are never exceptions: they are ordinary ``Result``
objects. The exceptions defined here signal programming errors (calling the
synchronous entry point on an async chain, misusing the builder, malformed
configuration) or come from the opt-in "throw instead" adapters.

Example:
    ```python
    from eskema import v
    from eskema.exceptions import EskemaError, ValidatorFailedError

    age = v().int_().gte(0).build()
    try:
        age.validate_or_throw(-1)
    except ValidatorFailedError as e:
        print(e.summary)
        print(e.result.expectations)
    except EskemaError as e:
        logger.error(f"Error: {e}")
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .result import Result


class EskemaError(Exception):
    """Base exception for all eskema errors.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (takes precedence when both are given)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class AsyncValidatorError(EskemaError):
    """Raised when ``validate()`` meets a validator chain with async members.

    Use ``validate_async()`` for chains that contain ``async def`` constraints.
    """

    BASE_MESSAGE = (
        "Cannot call validate() on a validator chain that contains async "
        "operations. Use validate_async() instead."
    )

    def __init__(self, where: str | None = None):
        message = self.BASE_MESSAGE
        if where:
            message = f"{message} (Context: {where})"
        super().__init__(message, context={"where": where} if where else None)


class ValidatorFailedError(EskemaError):
    """Raised by ``validate_or_throw()`` and ``throw_instead()`` on failure.

    The full failing ``Result`` is available as ``result``.
    """

    def __init__(self, result: Result):
        if result.is_valid:
            raise ValueError("ValidatorFailedError requires an invalid result")
        # Local import: formatting depends on result, which imports this module
        from .formatting import build_failure_message

        self.result = result
        super().__init__(
            build_failure_message(result),
            context={
                "errors": result.expectation_count,
                "codes": [e.code for e in result.expectations if e.code],
            },
        )

    @property
    def summary(self) -> str:
        """Single-line summary suitable for logs."""
        return (
            f"ValidatorFailed(errors={self.result.expectation_count}, "
            f"type={type(self.result.value).__name__})"
        )


class BuilderError(EskemaError):
    """Raised when a builder chain is used in an unsupported order."""

    pass


class ConfigurationError(EskemaError):
    """Raised when a validator definition cannot be built.

    Example:
        ```python
        raise ConfigurationError(
            "Unknown validator type",
            context={"type": "strnig", "path": "fields.name"}
        )
        ```
    """

    pass
