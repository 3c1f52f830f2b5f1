"""Human-readable rendering of validation outcomes."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .result import Result


def pretty_value(value: Any) -> str:
    """Render a value the way it would appear in a JSON payload.

    Strings are quoted, containers are JSON-encoded when possible and fall
    back to ``repr`` for values JSON cannot express.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            return repr(value)
    return str(value)


def build_failure_message(
    result: Result,
    max_value_length: int = 120,
    max_errors: int = 20,
) -> str:
    """Build the standard multi-line report for a failed result.

    Format:

        Validation failed (errors: <count>) for value (<type>): <value>
          1) <expectation.description> [code=<code>] {data=<data>}
          ...
          ... (<n> more not shown)

    Args:
        result: An invalid Result
        max_value_length: Truncate the rendered value past this length
        max_errors: Maximum number of expectations to list

    Returns:
        The formatted message
    """
    if result.is_valid:
        raise ValueError("build_failure_message() requires an invalid result")

    value_repr = pretty_value(result.value)
    if len(value_repr) > max_value_length:
        value_repr = f"{value_repr[:max_value_length]}…"

    lines = [
        f"Validation failed (errors: {result.expectation_count}) "
        f"for value ({type(result.value).__name__}): {value_repr}"
    ]
    shown = result.expectations[:max_errors]
    for i, exp in enumerate(shown, start=1):
        line = f"  {i}) {exp.description}"
        if exp.code is not None:
            line += f" [code={exp.code}]"
        if exp.data:
            line += f" {{data={dict(exp.data)}}}"
        lines.append(line)

    remaining = result.expectation_count - len(shown)
    if remaining > 0:
        lines.append(f"  … ({remaining} more not shown)")

    return "\n".join(lines)
