"""
API Module - HTTP interface to the engine.

A front end:
1. Creates a game session
2. Sends directional moves
3. Renders the returned state (tiles carry stable ids)
4. Resets or submits the score when the game ends

All state is session-scoped. No user accounts.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    MoveRequest,
    # Responses
    SessionResponse,
    MoveResponse,
    SessionListResponse,
    EndSessionResponse,
    SubmitScoreResponse,
    LeaderboardResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    GameStateInfo,
    TileInfo,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "MoveRequest",
    # Responses
    "SessionResponse",
    "MoveResponse",
    "SessionListResponse",
    "EndSessionResponse",
    "SubmitScoreResponse",
    "LeaderboardResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "GameStateInfo",
    "TileInfo",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
