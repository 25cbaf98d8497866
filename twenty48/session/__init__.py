"""
Session Module - Manages game sessions.

A session represents one play-through of the game:
- Created when a player starts a game
- Holds the current board, score and terminal flags
- Applies directional moves and spawns tiles
- Reports its best score to a BestScoreStore

Sessions are EPHEMERAL:
- No persistence beyond the best score
- A new game is a reset(), not a new process
"""

from .manager import SessionManager, Session, SessionConfig, MoveOutcome
from .store import (
    BestScoreStore,
    InMemoryBestScoreStore,
    FileBestScoreStore,
    ScoreSubmitter,
    InMemoryScoreBoard,
    ScoreEntry,
)

__all__ = [
    "SessionManager",
    "Session",
    "SessionConfig",
    "MoveOutcome",
    "BestScoreStore",
    "InMemoryBestScoreStore",
    "FileBestScoreStore",
    "ScoreSubmitter",
    "InMemoryScoreBoard",
    "ScoreEntry",
]
