"""
Pytest fixtures for Twenty48 tests.
"""

import pytest

from ..engine_core.board import Board
from ..session import Session, SessionConfig, InMemoryBestScoreStore


class ScriptedRandom:
    """
    Deterministic RandomSource.

    randrange() pops from `indices` (0 when exhausted), random()
    pops from `floats` (0.5 when exhausted, i.e. a 2 is spawned).
    """

    def __init__(self, indices=None, floats=None):
        self.indices = list(indices or [])
        self.floats = list(floats or [])

    def randrange(self, n: int) -> int:
        index = self.indices.pop(0) if self.indices else 0
        assert 0 <= index < n
        return index

    def random(self) -> float:
        return self.floats.pop(0) if self.floats else 0.5


@pytest.fixture
def scripted_rng() -> ScriptedRandom:
    """Always picks the first empty cell and spawns a 2."""
    return ScriptedRandom()


@pytest.fixture
def store() -> InMemoryBestScoreStore:
    return InMemoryBestScoreStore()


@pytest.fixture
def session(scripted_rng, store) -> Session:
    """
    Session whose opening board is [[2, 2, 0, 0], ...].

    Both opening tiles land in the first empty cells, ids 1 and 2.
    """
    return Session(SessionConfig(), store=store, rng=scripted_rng)


@pytest.fixture
def checkerboard() -> Board:
    """Full board with no two equal neighbours."""
    return Board.from_values([
        [2, 4, 2, 4],
        [4, 2, 4, 2],
        [2, 4, 2, 4],
        [4, 2, 4, 2],
    ])


@pytest.fixture
def sample_board() -> Board:
    """Board with tiles in every row and column."""
    return Board.from_values([
        [2, 4, 0, 8],
        [0, 16, 32, 0],
        [64, 0, 128, 256],
        [0, 512, 0, 1024],
    ])
