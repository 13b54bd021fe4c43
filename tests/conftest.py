"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from typing import Callable, Generator, List, Tuple

import pytest

# Add the src directory to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from rpg_dice.random_source import generator


class ScriptedEngine:
    """Number engine that returns pre-set values and records every call."""

    def __init__(self, values: List[int]):
        self.values = list(values)
        self.calls: List[Tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        if not self.values:
            raise AssertionError(f"ScriptedEngine ran out of values (asked for {a}..{b})")
        return self.values.pop(0)


@pytest.fixture
def script_rolls() -> Generator[Callable[..., ScriptedEngine], None, None]:
    """Swap the shared generator's engine for a scripted one."""
    original_engine = generator.engine

    def _script(*values: int) -> ScriptedEngine:
        engine = ScriptedEngine(list(values))
        generator.engine = engine
        return engine

    yield _script
    generator.engine = original_engine


@pytest.fixture
def seeded_generator() -> Generator[None, None, None]:
    """Seed the shared generator so random tests are repeatable."""
    original_engine = generator.engine
    generator.seed(1234)
    yield
    generator.engine = original_engine


def pytest_configure(config):
    """Pytest configuration hook."""
    # Add custom markers
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "slow: Slow running tests")
