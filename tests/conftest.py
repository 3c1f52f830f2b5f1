"""Pytest configuration for eskema tests."""

import sys
from pathlib import Path

import pytest

# Add the package source to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from eskema.result import Result  # noqa: E402
from eskema.validator import FunctionValidator  # noqa: E402


class CallRecorder:
    """Validator factory that records every value it is called with."""

    def __init__(self):
        self.calls = []

    def passing(self, name="passing"):
        def check(value):
            self.calls.append((name, value))
            return Result.success(value)

        return FunctionValidator(check, name=name)


@pytest.fixture
def recorder():
    """Fresh call recorder for ordering and short-circuit assertions."""
    return CallRecorder()


@pytest.fixture
def async_passing():
    """Async validator that always passes."""

    async def check(value):
        return Result.success(value)

    return FunctionValidator(check, name="async_passing")
