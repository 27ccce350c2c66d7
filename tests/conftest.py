"""
Shared fixtures for the combat tracker tests.
"""

from collections.abc import Callable, Iterable

import pytest


class ScriptedRandom:
    """A random source that returns pre-recorded die faces in order."""

    def __init__(self, values: Iterable[int]):
        self.values = list(values)
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        if not self.values:
            raise AssertionError(f"Unexpected extra roll randint({a}, {b})")
        value = self.values.pop(0)
        assert a <= value <= b, f"Scripted value {value} outside [{a}, {b}]"
        self.calls.append((a, b))
        return value


@pytest.fixture
def scripted() -> Callable[..., ScriptedRandom]:
    """Builds a ScriptedRandom: scripted(18, 7) yields 18 then 7."""

    def factory(*values: int) -> ScriptedRandom:
        return ScriptedRandom(values)

    return factory
