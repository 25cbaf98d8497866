"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a front end and the engine.
The engine only ever hands out integers and grids; wallets, signatures and
leaderboard transport belong to the caller.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- INVALID_DIRECTION: Move direction is not left/right/up/down
- VALIDATION_ERROR: Request body failed validation
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values (mirrors GamePhase)."""
    INITIALIZING = "initializing"
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class ScoringPolicyName(str, Enum):
    SUM_OF_MERGES = "sum_of_merges"
    MAX_TILE_VALUE = "max_tile_value"


class WonPolicyName(str, Enum):
    RECOMPUTED = "recomputed"
    STICKY = "sticky"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_DIRECTION = "INVALID_DIRECTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class TileInfo(BaseModel):
    """A tile and where it sits."""
    tile_id: int = Field(description="Stable identity for rendering")
    value: int
    row: int
    col: int


class GameStateInfo(BaseModel):
    """Published game state."""
    board: list[list[int]] = Field(description="Tile values, 0 for empty")
    tiles: list[TileInfo] = Field(default_factory=list)
    score: int = 0
    best_score: int = 0
    game_over: bool = False
    won: bool = False
    can_move: bool = True
    moves: int = 0
    status: SessionStatus = SessionStatus.PLAYING


# =============================================================================
# Requests
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Create a new game session."""
    scoring_policy: Optional[ScoringPolicyName] = Field(None, description="Server default when omitted")
    won_policy: Optional[WonPolicyName] = Field(None, description="Server default when omitted")
    seed: Optional[int] = Field(None, description="Seed for deterministic replay")


class MoveRequest(BaseModel):
    """A directional move."""
    direction: str = Field(
        description="left/right/up/down, an arrow key name, or a wasd key",
        examples=["left", "ArrowUp", "d"],
    )


# =============================================================================
# Responses
# =============================================================================

class SessionResponse(BaseModel):
    """Session status and current state."""
    session_id: str
    scoring_policy: ScoringPolicyName
    won_policy: WonPolicyName
    created_at: float
    state: GameStateInfo


class MoveResponse(BaseModel):
    """Result of a move."""
    session_id: str
    direction: str
    moved: bool
    gained: int = 0
    state: GameStateInfo


class SessionListResponse(BaseModel):
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class SubmitScoreResponse(BaseModel):
    """Acknowledges a score handed to the submitter."""
    session_id: str
    score: int
    game_over: bool


class LeaderboardEntry(BaseModel):
    rank: int
    session_id: str
    score: int
    submitted_at: float


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry]
    count: int


class ErrorResponse(BaseModel):
    """Standard error body."""
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    sessions: int = 0
