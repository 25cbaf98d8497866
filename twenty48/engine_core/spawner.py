"""
Spawner - Inserts new tiles into random empty cells.

Randomness is injected so games can be replayed deterministically.
`random.Random` satisfies RandomSource as-is.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol

from .board import Board, Tile


FOUR_PROBABILITY = 0.1


class RandomSource(Protocol):
    """Minimal randomness interface used by the spawner."""

    def random(self) -> float:
        """Next float in [0, 1)."""
        ...

    def randrange(self, n: int) -> int:
        """Next int in [0, n)."""
        ...


@dataclass
class TileIdCounter:
    """
    Session-scoped source of tile ids.

    Starts at 1. reset() returns it to 1 for a new game.
    """
    next_id: int = 1

    def next(self) -> int:
        tile_id = self.next_id
        self.next_id += 1
        return tile_id

    def reset(self):
        self.next_id = 1


def spawn_tile(
    board: Board,
    rng: RandomSource,
    counter: TileIdCounter,
    four_probability: float = FOUR_PROBABILITY,
) -> Board:
    """
    Return a new board with one tile added to a random empty cell.

    The value is 4 with probability `four_probability`, else 2.
    A full board is returned unchanged and no id is consumed.
    """
    empty = board.empty_cells()
    if not empty:
        return board

    row, col = empty[rng.randrange(len(empty))]
    value = 4 if rng.random() < four_probability else 2
    return board.with_tile(row, col, Tile(tile_id=counter.next(), value=value))
