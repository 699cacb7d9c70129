"""
Tests for the snapshot REST wrapper.
"""

import httpx
import pytest

from rank_stream.client.rank_service import (
    RankService,
    build_stream_url,
    normalize_response,
)


def make_service(handler, base_url="http://rank.test"):
    client = httpx.AsyncClient(base_url=base_url, transport=httpx.MockTransport(handler))
    return RankService(base_url=base_url, client=client)


class TestNormalizeResponse:
    """Tests for the accepted response shapes."""

    def test_bare_array(self):
        assert normalize_response([{"a": 1}]) == [{"a": 1}]

    def test_data_array(self):
        assert normalize_response({"data": [{"a": 1}]}) == [{"a": 1}]

    def test_data_items(self):
        assert normalize_response({"data": {"items": [{"a": 1}]}}) == [{"a": 1}]

    @pytest.mark.parametrize("payload", [None, {}, {"data": None}, {"data": {"items": "x"}}, "text", 42, {"items": []}])
    def test_anything_else_is_empty(self, payload):
        assert normalize_response(payload) == []


class TestBuildStreamUrl:
    def test_with_base(self):
        assert build_stream_url("https://api.clan.gg") == "https://api.clan.gg/api/rank/stream"

    def test_base_path_is_replaced(self):
        assert build_stream_url("https://api.clan.gg/v1/") == "https://api.clan.gg/api/rank/stream"

    @pytest.mark.parametrize("base", [None, "", "   ", "not a url"])
    def test_relative_fallback(self, base):
        assert build_stream_url(base) == "/api/rank/stream"


class TestRankService:
    @pytest.mark.asyncio
    async def test_get_rankings_sends_count(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": [{"gameCode": "abc", "memberName": "Kim", "totalPlayTime": 3600}]})

        service = make_service(handler)
        rankings = await service.get_rankings(20)
        await service.aclose()

        assert seen[0].url.path == "/api/rank"
        assert seen[0].url.params["count"] == "20"
        assert len(rankings) == 1
        assert rankings[0].game_code == "abc"
        assert rankings[0].total_play_time == 3600
        assert rankings[0].rank == 1

    @pytest.mark.asyncio
    async def test_skips_non_object_rows(self):
        def handler(request):
            return httpx.Response(200, json=[{"memberName": "Kim"}, "junk", {"memberName": "Lee"}])

        service = make_service(handler)
        rankings = await service.get_rankings(20)
        await service.aclose()

        assert [r.member_name for r in rankings] == ["Kim", "Lee"]
        assert [r.rank for r in rankings] == [1, 3]

    @pytest.mark.asyncio
    async def test_unexpected_shape_is_empty(self):
        service = make_service(lambda request: httpx.Response(200, json={"status": "ok"}))
        assert await service.get_rankings(5) == []
        await service.aclose()

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        service = make_service(lambda request: httpx.Response(503))
        with pytest.raises(httpx.HTTPStatusError):
            await service.get_rankings(5)
        await service.aclose()

    def test_stream_url(self):
        service = make_service(lambda request: httpx.Response(200, json=[]))
        assert service.stream_url() == "http://rank.test/api/rank/stream"
