"""
Pytest configuration and shared fixtures.
"""
from typing import List

import matplotlib
import pytest

from minesweeper_duel import GameSession, ManualScheduler
from minesweeper_duel.events import GameEvent

matplotlib.use("Agg")


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session(scheduler: ManualScheduler, clock: FakeClock) -> GameSession:
    """A 10x10 session in the main menu driven by a manual scheduler."""
    return GameSession(scheduler=scheduler, clock=clock)


@pytest.fixture
def events(session: GameSession) -> List[GameEvent]:
    """Every event the session emits, in order."""
    recorded: List[GameEvent] = []
    session.add_listener(recorded.append)
    return recorded
