"""eskema - composable validation for weakly-typed data.

This package provides:
- Validators that return structured, path-qualified results instead of raising
- AND/OR/NOT combinators usable as operators (``&``, ``|``, ``~``)
- Map and list schemas with optional/nullable semantics
- A fluent builder with a single type coercion per chain
- Transparent support for ``async def`` constraints
- Validators built from dict/YAML configuration
"""

from .builder import CustomPivot, v
from .combinators import (
    All,
    AnyOf,
    NoneOf,
    Not,
    all_of,
    any_of,
    none_of,
    not_,
    throw_instead,
    with_expectation,
)
from .contextual import Resolve, When, required_when, resolve, switch_by, when
from .exceptions import (
    AsyncValidatorError,
    BuilderError,
    ConfigurationError,
    EskemaError,
    ValidatorFailedError,
)
from .expectation import Expectation, ExpectationCodes
from .factory import ValidatorFactory, load_validator, validator_factory
from .formatting import build_failure_message, pretty_value
from .predicates import (
    IS_BOOL,
    IS_DATETIME,
    IS_FLOAT,
    IS_INT,
    IS_LIST,
    IS_MAP,
    IS_NULL,
    IS_NUMBER,
    IS_STRING,
)
from .presence import nullable, optional, required
from .result import Result
from .structure import eskema, eskema_list, eskema_strict, list_each
from .validator import VALID, ContextualValidator, FunctionValidator, Validator, validator

__version__ = "0.1.0"

__all__ = [
    # Core contract
    "Validator",
    "FunctionValidator",
    "ContextualValidator",
    "validator",
    "VALID",
    # Results
    "Result",
    "Expectation",
    "ExpectationCodes",
    # Combinators
    "All",
    "AnyOf",
    "NoneOf",
    "Not",
    "all_of",
    "any_of",
    "none_of",
    "not_",
    "with_expectation",
    "throw_instead",
    # Contextual
    "When",
    "Resolve",
    "when",
    "resolve",
    "required_when",
    "switch_by",
    # Structure and presence
    "eskema",
    "eskema_strict",
    "eskema_list",
    "list_each",
    "nullable",
    "optional",
    "required",
    # Cached type guards
    "IS_NULL",
    "IS_STRING",
    "IS_INT",
    "IS_FLOAT",
    "IS_NUMBER",
    "IS_BOOL",
    "IS_LIST",
    "IS_MAP",
    "IS_DATETIME",
    # Builder
    "v",
    "CustomPivot",
    # Configuration
    "ValidatorFactory",
    "validator_factory",
    "load_validator",
    # Formatting
    "pretty_value",
    "build_failure_message",
    # Exceptions
    "EskemaError",
    "AsyncValidatorError",
    "ValidatorFailedError",
    "BuilderError",
    "ConfigurationError",
]
