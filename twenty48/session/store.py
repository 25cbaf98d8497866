"""
Score Stores - Collaborators at the session boundary.

BestScoreStore persists the best score across sessions.
ScoreSubmitter receives a final score on explicit user action.

Both are best-effort from the session's point of view:
a failing store never takes a game down.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol
import json
import logging
import os
import time


logger = logging.getLogger(__name__)

BEST_SCORE_KEY = "2048-best-score"


class BestScoreStore(Protocol):
    """Persistence for the best score ever reached."""

    def load_best_score(self) -> int:
        ...

    def save_best_score(self, score: int) -> None:
        ...


class ScoreSubmitter(Protocol):
    """Receives a final score. Knows nothing about the engine."""

    def submit(self, session_id: str, score: int) -> None:
        ...


@dataclass
class InMemoryBestScoreStore:
    """Process-local store, used when no file is configured."""
    best_score: int = 0

    def load_best_score(self) -> int:
        return self.best_score

    def save_best_score(self, score: int) -> None:
        self.best_score = score


class FileBestScoreStore:
    """
    JSON file store.

    Usage:
        store = FileBestScoreStore("~/.twenty48/best.json")
        best = store.load_best_score()
        store.save_best_score(best + 4)

    File layout: {"2048-best-score": <int>}
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def load_best_score(self) -> int:
        if not self.path.exists():
            return 0
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return int(data.get(BEST_SCORE_KEY, 0))

    def save_best_score(self, score: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({BEST_SCORE_KEY: score}, f)
        os.replace(tmp_path, self.path)


def load_best_score_safely(store: BestScoreStore) -> int:
    """Load from `store`, falling back to 0 on any store failure."""
    try:
        return max(0, int(store.load_best_score()))
    except Exception:
        logger.exception("Could not load best score, starting from 0")
        return 0


def save_best_score_safely(store: BestScoreStore, score: int) -> bool:
    """Save to `store`. Returns False (and logs) on failure."""
    try:
        store.save_best_score(score)
        return True
    except Exception:
        logger.exception("Could not save best score %d", score)
        return False


@dataclass
class ScoreEntry:
    """A submitted score."""
    session_id: str
    score: int
    submitted_at: float


@dataclass
class InMemoryScoreBoard:
    """
    Records submitted scores and ranks them.

    Stands in for the external leaderboard; anything with a
    submit(session_id, score) method can replace it.
    """
    entries: list[ScoreEntry] = field(default_factory=list)

    def submit(self, session_id: str, score: int) -> None:
        self.entries.append(ScoreEntry(
            session_id=session_id,
            score=score,
            submitted_at=time.time(),
        ))

    def top(self, limit: int = 10) -> list[ScoreEntry]:
        """Highest scores first; earlier submissions win ties."""
        ranked = sorted(self.entries, key=lambda e: (-e.score, e.submitted_at))
        return ranked[:limit]
