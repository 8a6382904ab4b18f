"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test files.
"""

import os
import tempfile

# Headless pygame and a throwaway log directory, before anything imports them
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("TACTICS_LOG_DIR", tempfile.mkdtemp(prefix="tactics-logs-"))

import pytest
import pygame
from typing import Generator


@pytest.fixture(scope="session", autouse=True)
def pygame_init() -> Generator[None, None, None]:
    """
    Initialize pygame for the test session.
    Only the clock is used, so no display is opened.
    """
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture(autouse=True)
def quiet_telemetry():
    """Keep telemetry in memory only and start every test with an empty log."""
    from telemetry.logger import telemetry
    telemetry.path = None
    telemetry.enabled = True
    telemetry.recent.clear()
    yield telemetry
    telemetry.recent.clear()


class FixedRandom:
    """
    Deterministic stand-in for random.Random.

    randrange() always returns `draw`, choice() the first element,
    random() `roll`, and shuffle() leaves the order alone.
    """

    def __init__(self, draw: int = 0, roll: float = 0.0):
        self.draw = draw
        self.roll = roll

    def randrange(self, n):
        return self.draw

    def choice(self, seq):
        return seq[0]

    def random(self):
        return self.roll

    def shuffle(self, seq):
        pass


@pytest.fixture
def fixed_random():
    """Factory for FixedRandom instances."""
    return FixedRandom


@pytest.fixture
def make_actor():
    """
    Factory for actors with sensible defaults; bots by default.
    """
    from engine.battle.types import Actor, ReactiveBehaviour

    def _make(actor_id, side, position, **kwargs):
        kwargs.setdefault("name", f"{side}-{actor_id}")
        kwargs.setdefault("behaviour", ReactiveBehaviour())
        return Actor(id=actor_id, side=side, position=position, **kwargs)

    return _make


@pytest.fixture
def open_grid():
    """
    A 5x5 grid with nothing blocked.
    """
    from engine.battle.grid import BattleGrid
    return BattleGrid(5, 5)


@pytest.fixture
def battle_ai():
    """A BattleAI with a seeded random source."""
    import random
    from engine.battle.ai import BattleAI
    return BattleAI(rng=random.Random(1234), exploration_range=60.0)


@pytest.fixture
def presenter():
    from engine.core.headless import HeadlessPresenter
    return HeadlessPresenter()
