"""Shared test fixtures for Europa."""

import io
import random

import pytest
import structlog
from rich.console import Console

from europa.engine.state import GameState
from europa.engine.station import new_game_state
from europa.session import GameSession


class FixedRandom(random.Random):
    """A random source whose jitter is always zero."""

    def randint(self, a: int, b: int) -> int:
        return max(a, min(0, b))


@pytest.fixture(autouse=True)
def _clear_log_context():
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def fixed_rng() -> FixedRandom:
    return FixedRandom()


@pytest.fixture
def state() -> GameState:
    return new_game_state("Riley")


@pytest.fixture
def session(fixed_rng: FixedRandom) -> GameSession:
    return GameSession.new("Riley", rng=fixed_rng)


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=100, color_system=None)
