"""
Game State - Immutable snapshot published by a session after every change.

Also holds the policies that decide how the snapshot is computed:
- ScoringPolicy: what "score" means
- WonPolicy: whether reaching the win value stays won
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .board import Board


WIN_VALUE = 2048


class GamePhase(Enum):
    """High-level game phases."""
    INITIALIZING = "initializing"
    PLAYING = "playing"
    WON = "won"  # Win value reached, moves remain
    LOST = "lost"  # No legal move left


class ScoringPolicy(Enum):
    """
    How a session computes its score.

    SUM_OF_MERGES: every merge adds the merged value.
    MAX_TILE_VALUE: score is the largest tile on the board.
    """
    SUM_OF_MERGES = "sum_of_merges"
    MAX_TILE_VALUE = "max_tile_value"

    def initial_score(self, board: Board) -> int:
        """Score of a freshly spawned board."""
        if self == ScoringPolicy.MAX_TILE_VALUE:
            return board.max_value()
        return 0

    def next_score(self, score: int, gained: int, board: Board) -> int:
        """Score after an accepted move producing `board`."""
        if self == ScoringPolicy.MAX_TILE_VALUE:
            return max(score, board.max_value())
        return score + gained


class WonPolicy(Enum):
    """Whether `won` is recomputed each move or stays true once reached."""
    RECOMPUTED = "recomputed"
    STICKY = "sticky"


def has_won(board: Board, win_value: int = WIN_VALUE) -> bool:
    """True if any tile has reached the win value."""
    return board.max_value() >= win_value


@dataclass(frozen=True)
class GameState:
    """
    Read-only snapshot of a session.

    Consumers never mutate this; the session replaces it wholesale.
    """
    board: Board
    score: int = 0
    best_score: int = 0
    game_over: bool = False
    won: bool = False
    can_move: bool = True
    moves: int = 0
    phase: GamePhase = GamePhase.INITIALIZING

    @staticmethod
    def phase_for(won: bool, can_move: bool) -> GamePhase:
        """Derive the phase from the terminal flags."""
        if not can_move:
            return GamePhase.LOST
        if won:
            return GamePhase.WON
        return GamePhase.PLAYING

    def to_dict(self) -> dict[str, Any]:
        """Serializable form for replays and the CLI."""
        return {
            "board": self.board.values(),
            "score": self.score,
            "best_score": self.best_score,
            "game_over": self.game_over,
            "won": self.won,
            "can_move": self.can_move,
            "moves": self.moves,
            "phase": self.phase.value,
        }
