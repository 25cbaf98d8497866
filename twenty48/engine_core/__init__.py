"""
Engine Core - Pure 2048 board logic.

The engine is the runtime that:
1. Represents the tile grid (Board)
2. Applies directional moves (move_board)
3. Spawns new tiles from an injected randomness source
4. Describes the published snapshot and its policies (GameState)
"""

from .board import Board, Tile, Direction, BOARD_SIZE
from .move import MoveResult, LineResult, compress_line, move_board, available_moves
from .spawner import RandomSource, TileIdCounter, spawn_tile, FOUR_PROBABILITY
from .state import GameState, GamePhase, ScoringPolicy, WonPolicy, has_won, WIN_VALUE

__all__ = [
    "Board",
    "Tile",
    "Direction",
    "BOARD_SIZE",
    "MoveResult",
    "LineResult",
    "compress_line",
    "move_board",
    "available_moves",
    "RandomSource",
    "TileIdCounter",
    "spawn_tile",
    "FOUR_PROBABILITY",
    "GameState",
    "GamePhase",
    "ScoringPolicy",
    "WonPolicy",
    "has_won",
    "WIN_VALUE",
]
