"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Session created → best score loaded from the store
2. reset() → empty board, tile ids back to 1, two tiles spawned
3. apply_move() per directional input:
   - Move engine computes the candidate board
   - Unchanged board → nothing happens, no tile spawned
   - Otherwise one tile is spawned and the snapshot recomputed
4. Game over when no legal move remains; reset() starts again

PERSISTENCE RULES:
- Sessions live in memory only
- Only the best score crosses the boundary, via a BestScoreStore
- The store is re-read before every save, so sessions sharing it never
  lower a best score another session wrote
- Store failures are logged and never interrupt play

CONCURRENCY:
- One writer at a time per session (lock around reset/apply_move)
- Snapshots are immutable, reads need no lock
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import logging
import random
import threading
import time
import uuid

from ..engine_core.board import Board, Direction, BOARD_SIZE
from ..engine_core.move import MoveResult, move_board
from ..engine_core.spawner import RandomSource, TileIdCounter, spawn_tile, FOUR_PROBABILITY
from ..engine_core.state import (
    GameState, GamePhase, ScoringPolicy, WonPolicy, has_won, WIN_VALUE,
)
from .store import (
    BestScoreStore, InMemoryBestScoreStore, ScoreSubmitter,
    load_best_score_safely, save_best_score_safely,
)


logger = logging.getLogger(__name__)

INITIAL_TILES = 2


@dataclass(frozen=True)
class MoveOutcome:
    """A move request and the snapshot it produced, captured together."""
    state: GameState
    moved: bool = False
    gained: int = 0
    merged_values: tuple[int, ...] = ()


@dataclass
class SessionConfig:
    """
    Settings fixed for the lifetime of a session.

    `seed` is only used when no randomness source is injected.
    """
    size: int = BOARD_SIZE
    win_value: int = WIN_VALUE
    four_probability: float = FOUR_PROBABILITY
    scoring_policy: ScoringPolicy = ScoringPolicy.SUM_OF_MERGES
    won_policy: WonPolicy = WonPolicy.RECOMPUTED
    seed: int | None = None


class Session:
    """
    One play-through of the game.

    Usage:
        session = Session(SessionConfig(seed=7))
        state = session.apply_move(Direction.LEFT)
        if state.game_over:
            session.reset()
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        store: BestScoreStore | None = None,
        rng: RandomSource | None = None,
        session_id: str | None = None,
    ):
        self.config = config or SessionConfig()
        self.store = store if store is not None else InMemoryBestScoreStore()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.session_id = session_id or str(uuid.uuid4())
        self.created_at = time.time()
        self.last_active = self.created_at
        self.counter = TileIdCounter()
        self.last_move: MoveResult | None = None

        self._lock = threading.Lock()
        self._state = GameState(
            board=Board.empty(self.config.size),
            best_score=load_best_score_safely(self.store),
            phase=GamePhase.INITIALIZING,
        )
        self.reset()

    @property
    def state(self) -> GameState:
        """Current published snapshot."""
        return self._state

    @property
    def board(self) -> Board:
        return self._state.board

    def reset(self) -> GameState:
        """
        Start a new game.

        The best score is kept; it only rises here when the policy
        scores a fresh board above it (max-tile scoring).
        """
        with self._lock:
            self.counter.reset()
            board = Board.empty(self.config.size)
            for _ in range(INITIAL_TILES):
                board = self._spawn(board)

            score = self.config.scoring_policy.initial_score(board)
            best_score = self._update_best(score)
            won = has_won(board, self.config.win_value)
            can_move = board.has_any_legal_move()

            self.last_move = None
            self._publish(GameState(
                board=board,
                score=score,
                best_score=best_score,
                game_over=not can_move,
                won=won,
                can_move=can_move,
                moves=0,
                phase=GameState.phase_for(won, can_move),
            ))
            logger.debug("Session %s reset", self.session_id)
            return self._state

    def restore(self, board: Board, score: int = 0, moves: int = 0) -> GameState:
        """
        Resume a saved game from `board`.

        New tile ids continue after the highest id on the board.
        """
        if board.size != self.config.size:
            raise ValueError(
                f"Board size {board.size} does not match session size {self.config.size}"
            )
        with self._lock:
            self.counter.next_id = max((t.tile_id for t in board.tiles()), default=0) + 1
            best_score = self._update_best(score)
            won = has_won(board, self.config.win_value)
            can_move = board.has_any_legal_move()

            self.last_move = None
            self._publish(GameState(
                board=board,
                score=score,
                best_score=best_score,
                game_over=not can_move,
                won=won,
                can_move=can_move,
                moves=moves,
                phase=GameState.phase_for(won, can_move),
            ))
            return self._state

    def apply_move(self, direction: Direction | str) -> GameState:
        """
        Apply a directional move.

        Returns the unchanged snapshot when no move is possible or
        the move does not change the board.
        """
        return self.play(direction).state

    def play(self, direction: Direction | str) -> MoveOutcome:
        """Like apply_move(), also reporting what the move did."""
        direction = Direction.parse(direction)
        with self._lock:
            current = self._state
            if not current.can_move:
                return MoveOutcome(state=current)

            result = move_board(current.board, direction)
            self.last_move = result
            if not result.moved:
                return MoveOutcome(state=current)

            board = self._spawn(result.board)
            score = self.config.scoring_policy.next_score(
                current.score, result.gained, board,
            )
            best_score = self._update_best(score)

            won = has_won(board, self.config.win_value)
            if self.config.won_policy == WonPolicy.STICKY:
                won = won or current.won
            can_move = board.has_any_legal_move()

            self._publish(GameState(
                board=board,
                score=score,
                best_score=best_score,
                game_over=not can_move,
                won=won,
                can_move=can_move,
                moves=current.moves + 1,
                phase=GameState.phase_for(won, can_move),
            ))
            return MoveOutcome(
                state=self._state,
                moved=True,
                gained=result.gained,
                merged_values=tuple(result.merged_values),
            )

    def submit_score(self, submitter: ScoreSubmitter) -> int:
        """Hand the current score to an external submitter."""
        score = self._state.score
        submitter.submit(self.session_id, score)
        return score

    def is_active(self) -> bool:
        """A session is active until the game is lost."""
        return not self._state.game_over

    def _spawn(self, board: Board) -> Board:
        return spawn_tile(
            board, self.rng, self.counter, self.config.four_probability,
        )

    def _update_best(self, score: int) -> int:
        # Other sessions may share the store, so compare against its current value.
        best_score = max(self._state.best_score, load_best_score_safely(self.store))
        if score > best_score:
            save_best_score_safely(self.store, score)
            return score
        return best_score

    def _publish(self, state: GameState):
        self._state = state
        self.last_active = time.time()


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions sharing one best-score store
    - Track active sessions
    - Clean up idle sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(
        self,
        store: BestScoreStore | None = None,
        default_config: SessionConfig | None = None,
    ):
        self.store = store if store is not None else InMemoryBestScoreStore()
        self.default_config = default_config or SessionConfig()
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create_session(
        self,
        config: SessionConfig | None = None,
        rng: RandomSource | None = None,
    ) -> Session:
        """Create and register a new session."""
        session = Session(
            config=config or self.default_config,
            store=self.store,
            rng=rng,
        )
        with self._lock:
            self._sessions[session.session_id] = session
        logger.debug("Created session %s", session.session_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """Remove a session. Returns False if it did not exist."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        return session is not None

    def list_sessions(self) -> list[str]:
        """IDs of all registered sessions."""
        return list(self._sessions.keys())

    def list_active_sessions(self) -> list[str]:
        """IDs of sessions whose game is not over."""
        return [
            sid for sid, session in list(self._sessions.items())
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> list[str]:
        """
        Remove sessions idle for longer than `max_age_seconds`.

        Returns the removed IDs.
        """
        current_time = time.time()
        to_remove = [
            sid for sid, session in list(self._sessions.items())
            if current_time - session.last_active > max_age_seconds
        ]
        for session_id in to_remove:
            self.end_session(session_id)
        return to_remove

    def stats(self) -> dict[str, Any]:
        """Counts for the health endpoint."""
        return {
            "sessions": len(self._sessions),
            "active": len(self.list_active_sessions()),
        }
