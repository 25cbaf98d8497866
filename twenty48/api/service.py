"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Hands final scores to the score submitter
4. Formats responses

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Lookups that fail return an ErrorResponse instead of raising.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Union

from .schemas import (
    # Requests
    CreateSessionRequest,
    MoveRequest,
    # Responses
    SessionResponse,
    MoveResponse,
    SubmitScoreResponse,
    LeaderboardResponse,
    LeaderboardEntry,
    ErrorResponse,
    # Shared
    GameStateInfo,
    TileInfo,
    # Enums
    ErrorCode,
    SessionStatus,
    ScoringPolicyName,
    WonPolicyName,
)
from ..engine_core.board import Direction
from ..engine_core.state import GameState, ScoringPolicy, WonPolicy
from ..session import (
    SessionManager, Session, InMemoryScoreBoard,
)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()
        session = service.create_session(CreateSessionRequest(seed=1))
        result = service.move(session.session_id, MoveRequest(direction="left"))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    score_board: InMemoryScoreBoard = field(default_factory=InMemoryScoreBoard)

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Create a new game session."""
        config = replace(self.session_manager.default_config, seed=request.seed)
        if request.scoring_policy is not None:
            config.scoring_policy = ScoringPolicy(request.scoring_policy.value)
        if request.won_policy is not None:
            config.won_policy = WonPolicy(request.won_policy.value)
        session = self.session_manager.create_session(config)
        return self._session_response(session)

    def get_session(self, session_id: str) -> Union[SessionResponse, ErrorResponse]:
        """Get session status."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_response(session)

    def end_session(self, session_id: str) -> bool:
        """End a session."""
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_sessions()

    def move(
        self, session_id: str, request: MoveRequest,
    ) -> Union[MoveResponse, ErrorResponse]:
        """Apply a directional move to a session."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        try:
            direction = Direction.parse(request.direction)
        except ValueError as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.INVALID_DIRECTION,
                details={"valid": [d.value for d in Direction]},
            )

        outcome = session.play(direction)
        return MoveResponse(
            session_id=session_id,
            direction=direction.value,
            moved=outcome.moved,
            gained=outcome.gained,
            state=state_info(outcome.state),
        )

    def reset(self, session_id: str) -> Union[SessionResponse, ErrorResponse]:
        """Start a new game in an existing session."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        session.reset()
        return self._session_response(session)

    def submit_score(self, session_id: str) -> Union[SubmitScoreResponse, ErrorResponse]:
        """Hand the session's score to the score board."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        score = session.submit_score(self.score_board)
        return SubmitScoreResponse(
            session_id=session_id,
            score=score,
            game_over=session.state.game_over,
        )

    def leaderboard(self, limit: int = 10) -> LeaderboardResponse:
        """Top submitted scores."""
        entries = [
            LeaderboardEntry(
                rank=i + 1,
                session_id=entry.session_id,
                score=entry.score,
                submitted_at=entry.submitted_at,
            )
            for i, entry in enumerate(self.score_board.top(limit))
        ]
        return LeaderboardResponse(entries=entries, count=len(entries))

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    def _session_response(self, session: Session) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            scoring_policy=ScoringPolicyName(session.config.scoring_policy.value),
            won_policy=WonPolicyName(session.config.won_policy.value),
            created_at=session.created_at,
            state=state_info(session.state),
        )

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )


def state_info(state: GameState) -> GameStateInfo:
    """Convert an engine snapshot to its API model."""
    tiles = [
        TileInfo(tile_id=tile.tile_id, value=tile.value, row=r, col=c)
        for r, row in enumerate(state.board)
        for c, tile in enumerate(row)
        if tile is not None
    ]
    return GameStateInfo(
        board=state.board.values(),
        tiles=tiles,
        score=state.score,
        best_score=state.best_score,
        game_over=state.game_over,
        won=state.won,
        can_move=state.can_move,
        moves=state.moves,
        status=SessionStatus(state.phase.value),
    )
