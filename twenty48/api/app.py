"""
FastAPI Application - REST API for game front ends.

Endpoints:
    POST   /api/v1/sessions               Create game session
    GET    /api/v1/sessions               List sessions
    GET    /api/v1/sessions/{id}          Get session status
    DELETE /api/v1/sessions/{id}          End session
    POST   /api/v1/sessions/{id}/move     Apply a directional move
    POST   /api/v1/sessions/{id}/reset    Start a new game
    POST   /api/v1/sessions/{id}/submit   Submit the current score
    GET    /api/v1/leaderboard            Top submitted scores

Move Flow:
    1. POST /move with {"direction": "left"}
    2. moved=false means the board was unchanged and no tile spawned
    3. state.game_over=true means only /reset can continue the session

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import logging
import os

from fastapi import FastAPI, Query
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..engine_core.state import ScoringPolicy, WonPolicy
from ..session import SessionManager, SessionConfig, InMemoryBestScoreStore, FileBestScoreStore
from .service import APIService
from .schemas import (
    # Request models
    CreateSessionRequest,
    MoveRequest,
    # Response models
    SessionResponse,
    MoveResponse,
    SessionListResponse,
    EndSessionResponse,
    SubmitScoreResponse,
    LeaderboardResponse,
    ErrorResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)


logger = logging.getLogger(__name__)

# Environment configuration
TWENTY48_ENV = os.getenv("TWENTY48_ENV", "development")
TWENTY48_BEST_SCORE_FILE = os.getenv("TWENTY48_BEST_SCORE_FILE", None)
TWENTY48_SCORING_POLICY = os.getenv("TWENTY48_SCORING_POLICY", ScoringPolicy.SUM_OF_MERGES.value)
TWENTY48_WON_POLICY = os.getenv("TWENTY48_WON_POLICY", WonPolicy.RECOMPUTED.value)
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def default_service() -> APIService:
    """Build the service from environment configuration."""
    store = (
        FileBestScoreStore(TWENTY48_BEST_SCORE_FILE)
        if TWENTY48_BEST_SCORE_FILE
        else InMemoryBestScoreStore()
    )
    config = SessionConfig(
        scoring_policy=ScoringPolicy(TWENTY48_SCORING_POLICY),
        won_policy=WonPolicy(TWENTY48_WON_POLICY),
    )
    return APIService(session_manager=SessionManager(store=store, default_config=config))


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (built from env if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Twenty48 Engine API",
        description="""
2048 board engine - sessions, moves, scoring.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_DIRECTION` | Direction is not left/right/up/down |
| `VALIDATION_ERROR` | Request body failed validation |
| `INTERNAL_ERROR` | Unexpected server failure (HTTP 500) |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or default_service()
    app.state.service = api_service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_to_response(error: ErrorResponse) -> JSONResponse:
        status_code = 404 if error.error_code == ErrorCode.SESSION_NOT_FOUND else 400
        return make_error_response(
            error.error_code, error.error, status_code=status_code, details=error.details,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            status_code=422,
            details={"errors": [str(e.get("msg")) for e in exc.errors()]},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return make_error_response(
            ErrorCode.INTERNAL_ERROR,
            "Internal server error",
            status_code=500,
        )

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(body: Optional[CreateSessionRequest] = None) -> SessionResponse:
        """
        Create a new game session with two tiles already spawned.

        Pass `seed` for a reproducible game.
        """
        return api_service.create_session(body or CreateSessionRequest())

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current state of a game session."""
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        """End a game session and release it."""
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/move",
        response_model=MoveResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid direction"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game Loop"],
        summary="Apply a directional move",
    )
    async def move(session_id: str, body: MoveRequest) -> Union[MoveResponse, JSONResponse]:
        """
        Apply a move.

        **Request Body:**
        ```json
        {"direction": "left"}
        ```
        """
        response = api_service.move(session_id, body)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/reset",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Start a new game",
    )
    async def reset(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Reset the board; the best score is kept."""
        response = api_service.reset(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    # =========================================================================
    # Scores
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/submit",
        response_model=SubmitScoreResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Scores"],
        summary="Submit the current score",
    )
    async def submit_score(session_id: str) -> Union[SubmitScoreResponse, JSONResponse]:
        """Hand the session's score to the score board."""
        response = api_service.submit_score(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_response(response)
        return response

    @app.get(
        "/api/v1/leaderboard",
        response_model=LeaderboardResponse,
        tags=["Scores"],
        summary="Top submitted scores",
    )
    async def leaderboard(
        limit: Annotated[int, Query(description="Number of entries", ge=1, le=100)] = 10,
    ) -> LeaderboardResponse:
        return api_service.leaderboard(limit)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="twenty48-engine",
            version=__version__,
            sessions=len(api_service.list_sessions()),
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Twenty48 Engine API",
            "version": __version__,
            "env": TWENTY48_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn twenty48.api.app:app
app = create_app()
