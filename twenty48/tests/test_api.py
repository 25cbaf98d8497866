"""
Tests for API layer.

Tests:
- API service methods
- HTTP routes via FastAPI's TestClient
- Error responses
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.schemas import (
    CreateSessionRequest,
    MoveRequest,
    ErrorResponse,
    ErrorCode,
    ScoringPolicyName,
    SessionStatus,
    WonPolicyName,
)
from ..api.service import APIService
from ..engine_core.board import Board
from ..engine_core.state import ScoringPolicy, WonPolicy
from ..session import SessionManager, SessionConfig, InMemoryBestScoreStore


def stuck_values():
    return [
        [2, 4, 2, 4],
        [4, 2, 4, 2],
        [2, 4, 2, 4],
        [4, 2, 4, 2],
    ]


class TestAPIService:
    """Tests for APIService."""

    @pytest.fixture
    def service(self):
        """Create a fresh API service."""
        return APIService()

    def test_create_session(self, service):
        response = service.create_session(CreateSessionRequest(seed=3))

        assert response.session_id
        assert response.scoring_policy == ScoringPolicyName.SUM_OF_MERGES
        assert len(response.state.tiles) == 2
        assert response.state.status == SessionStatus.PLAYING
        assert sum(v > 0 for row in response.state.board for v in row) == 2

    def test_create_max_tile_session(self, service):
        response = service.create_session(CreateSessionRequest(
            scoring_policy=ScoringPolicyName.MAX_TILE_VALUE,
        ))
        assert response.state.score in (2, 4)

    def test_create_uses_configured_defaults(self):
        defaults = SessionConfig(
            size=5,
            scoring_policy=ScoringPolicy.MAX_TILE_VALUE,
            won_policy=WonPolicy.STICKY,
        )
        service = APIService(session_manager=SessionManager(default_config=defaults))

        response = service.create_session(CreateSessionRequest())
        assert response.scoring_policy == ScoringPolicyName.MAX_TILE_VALUE
        assert response.won_policy == WonPolicyName.STICKY
        assert len(response.state.board) == 5
        assert response.state.score in (2, 4)

    def test_request_overrides_configured_defaults(self):
        defaults = SessionConfig(scoring_policy=ScoringPolicy.MAX_TILE_VALUE)
        service = APIService(session_manager=SessionManager(default_config=defaults))

        response = service.create_session(CreateSessionRequest(
            scoring_policy=ScoringPolicyName.SUM_OF_MERGES,
        ))
        assert response.scoring_policy == ScoringPolicyName.SUM_OF_MERGES
        assert response.state.score == 0

    def test_get_nonexistent_session(self, service):
        response = service.get_session("nonexistent-id")
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.SESSION_NOT_FOUND

    def test_move_reports_gain(self, service):
        created = service.create_session(CreateSessionRequest())
        session = service.session_manager.get_session(created.session_id)
        session.restore(Board.from_values([
            [2, 2, 0, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
        ]))

        response = service.move(created.session_id, MoveRequest(direction="left"))
        assert response.moved
        assert response.gained == 4
        assert response.direction == "left"
        assert response.state.board[0][0] == 4
        assert response.state.score == 4

    def test_no_op_move(self, service):
        created = service.create_session(CreateSessionRequest())
        session = service.session_manager.get_session(created.session_id)
        session.restore(Board.from_values(stuck_values()))

        response = service.move(created.session_id, MoveRequest(direction="up"))
        assert not response.moved
        assert response.gained == 0
        assert response.state.game_over
        assert response.state.status == SessionStatus.LOST

    def test_concurrent_moves_report_their_own_gain(self, service):
        created = service.create_session(CreateSessionRequest(seed=8))
        directions = ["left", "up", "right", "down"] * 50

        with ThreadPoolExecutor(max_workers=8) as pool:
            responses = list(pool.map(
                lambda d: service.move(created.session_id, MoveRequest(direction=d)),
                directions,
            ))

        final = service.get_session(created.session_id).state
        assert sum(r.gained for r in responses) == final.score
        assert sum(r.moved for r in responses) == final.moves
        assert all(r.gained == 0 for r in responses if not r.moved)

    def test_invalid_direction(self, service):
        created = service.create_session(CreateSessionRequest())
        response = service.move(created.session_id, MoveRequest(direction="sideways"))
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.INVALID_DIRECTION

    def test_reset(self, service):
        created = service.create_session(CreateSessionRequest())
        session = service.session_manager.get_session(created.session_id)
        session.restore(Board.from_values(stuck_values()))

        response = service.reset(created.session_id)
        assert not response.state.game_over
        assert len(response.state.tiles) == 2

    def test_submit_and_leaderboard(self, service):
        first = service.create_session(CreateSessionRequest())
        second = service.create_session(CreateSessionRequest())
        service.session_manager.get_session(first.session_id).restore(
            Board.from_values(stuck_values()), score=500,
        )
        service.session_manager.get_session(second.session_id).restore(
            Board.from_values(stuck_values()), score=900,
        )

        assert service.submit_score(first.session_id).score == 500
        assert service.submit_score(second.session_id).game_over

        leaderboard = service.leaderboard()
        assert leaderboard.count == 2
        assert [e.score for e in leaderboard.entries] == [900, 500]
        assert [e.rank for e in leaderboard.entries] == [1, 2]

    def test_end_session(self, service):
        created = service.create_session(CreateSessionRequest())
        assert service.end_session(created.session_id)
        assert isinstance(service.get_session(created.session_id), ErrorResponse)

    def test_sessions_are_independent(self):
        store = InMemoryBestScoreStore()
        service = APIService(session_manager=SessionManager(store=store))
        first = service.create_session(CreateSessionRequest(seed=1))
        second = service.create_session(CreateSessionRequest(seed=2))
        assert first.session_id != second.session_id

        service.end_session(first.session_id)
        assert not isinstance(service.get_session(second.session_id), ErrorResponse)


class TestHTTPRoutes:
    """Tests for the FastAPI application."""

    @pytest.fixture
    def client(self):
        return TestClient(create_app(APIService()))

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_session_lifecycle(self, client):
        created = client.post("/api/v1/sessions", json={"seed": 5})
        assert created.status_code == 200
        session_id = created.json()["session_id"]

        listed = client.get("/api/v1/sessions").json()
        assert session_id in listed["sessions"]

        fetched = client.get(f"/api/v1/sessions/{session_id}")
        assert fetched.status_code == 200
        assert fetched.json()["state"]["moves"] == 0

        ended = client.delete(f"/api/v1/sessions/{session_id}")
        assert ended.json()["success"] is True
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404

    def test_create_without_body(self, client):
        response = client.post("/api/v1/sessions")
        assert response.status_code == 200
        assert response.json()["won_policy"] == "recomputed"

    def test_move_route(self, client):
        session_id = client.post("/api/v1/sessions", json={"seed": 5}).json()["session_id"]
        response = client.post(
            f"/api/v1/sessions/{session_id}/move", json={"direction": "ArrowLeft"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["direction"] == "left"
        assert isinstance(body["moved"], bool)

    def test_move_invalid_direction(self, client):
        session_id = client.post("/api/v1/sessions").json()["session_id"]
        response = client.post(
            f"/api/v1/sessions/{session_id}/move", json={"direction": "sideways"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_DIRECTION"

    def test_move_unknown_session(self, client):
        response = client.post("/api/v1/sessions/missing/move", json={"direction": "up"})
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_move_missing_body(self, client):
        session_id = client.post("/api/v1/sessions").json()["session_id"]
        response = client.post(f"/api/v1/sessions/{session_id}/move", json={})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_reset_and_submit(self, client):
        session_id = client.post("/api/v1/sessions").json()["session_id"]
        assert client.post(f"/api/v1/sessions/{session_id}/reset").status_code == 200

        submitted = client.post(f"/api/v1/sessions/{session_id}/submit")
        assert submitted.status_code == 200
        assert submitted.json()["score"] == 0

        board = client.get("/api/v1/leaderboard", params={"limit": 5}).json()
        assert board["count"] == 1
        assert board["entries"][0]["session_id"] == session_id

    def test_create_without_body_uses_configured_policy(self):
        defaults = SessionConfig(scoring_policy=ScoringPolicy.MAX_TILE_VALUE)
        service = APIService(session_manager=SessionManager(default_config=defaults))
        client = TestClient(create_app(service))

        response = client.post("/api/v1/sessions")
        assert response.status_code == 200
        assert response.json()["scoring_policy"] == "max_tile_value"

    def test_unexpected_error_is_internal_error(self):
        class FailingLeaderboardService(APIService):
            def leaderboard(self, limit: int = 10):
                raise RuntimeError("score board offline")

        client = TestClient(
            create_app(FailingLeaderboardService()), raise_server_exceptions=False,
        )
        response = client.get("/api/v1/leaderboard")
        assert response.status_code == 500
        assert response.json()["error_code"] == "INTERNAL_ERROR"
