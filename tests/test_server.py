"""
Tests for the demo ranking backend.
"""

import pytest
from fastapi.testclient import TestClient

from rank_stream.server.main import app
from rank_stream.server.rank_board import RankBoard, board


@pytest.fixture
def seeded_board():
    saved = dict(board.members)
    board.members.clear()
    board.add_member("kim01", "Kim", "Squad leader", total_play_time=100)
    board.add_member("lee02", "Lee", None, total_play_time=300)
    board.add_member("park03", "Park", None, total_play_time=200)
    yield board
    board.members.clear()
    board.members.update(saved)


class TestRankRoutes:
    def test_snapshot_is_ordered_by_play_time(self, seeded_board):
        client = TestClient(app)
        response = client.get("/api/rank?count=2")

        assert response.status_code == 200
        rows = response.json()["data"]
        assert [r["gameCode"] for r in rows] == ["lee02", "park03"]
        assert [r["rank"] for r in rows] == [1, 2]
        assert "X-Process-Time-Ms" in response.headers

    def test_oversized_count_is_clamped(self, seeded_board):
        client = TestClient(app)
        response = client.get("/api/rank?count=150")

        assert response.status_code == 200
        assert len(response.json()["data"]) == 3

    def test_count_must_be_positive(self, seeded_board):
        client = TestClient(app)
        assert client.get("/api/rank?count=0").status_code == 422

    def test_healthz(self):
        client = TestClient(app)
        assert client.get("/healthz").json() == {"status": "ok"}


class TestRankBoard:
    """Tests for RankBoard state and fan-out."""

    def test_record_play_notifies_subscribers(self):
        local = RankBoard()
        local.add_member("kim01", "Kim")
        queue = local.subscribe_sse("c1")

        notification = local.record_play("kim01", 600)

        assert notification == {"version": 1, "gameCode": "kim01"}
        assert queue.get_nowait() == notification
        assert local.members["kim01"]["totalPlayTime"] == 600
        assert local.members["kim01"]["lastPlayedAt"] is not None

    def test_negative_session_is_ignored(self):
        local = RankBoard()
        local.add_member("kim01", "Kim", total_play_time=50)
        local.record_play("kim01", -20)

        assert local.members["kim01"]["totalPlayTime"] == 50

    def test_full_queue_drops_instead_of_blocking(self):
        local = RankBoard()
        local.add_member("kim01", "Kim")
        queue = local.subscribe_sse("slow")
        for _ in range(queue.maxsize + 5):
            local.record_play("kim01", 1)

        assert queue.qsize() == queue.maxsize
        assert local.version == queue.maxsize + 5

    def test_unsubscribe(self):
        local = RankBoard()
        local.subscribe_sse("c1")
        local.unsubscribe_sse("c1")
        local.unsubscribe_sse("c1")

        assert local.get_stats()["active_sse"] == 0
