"""
Tests for SnapshotLoader state transitions.
"""

import httpx
import pytest

from conftest import make_entries, settle
from rank_stream.client.snapshot_loader import SnapshotLoader


class TestSnapshotLoader:
    """Tests for SnapshotLoader.load and SnapshotLoader.schedule."""

    @pytest.mark.parametrize("page_size", [0, -3, 2.5, "20", True])
    def test_page_size_must_be_positive_int(self, source, page_size):
        with pytest.raises(ValueError):
            SnapshotLoader(source, page_size)

    @pytest.mark.asyncio
    async def test_foreground_load_flags(self, source):
        loader = SnapshotLoader(source, 20)
        task = loader.schedule(silent=False)

        assert loader.is_loading is True
        assert loader.is_refreshing is False

        await settle()
        source.resolve(make_entries("Kim"))
        await task

        assert loader.is_loading is False
        assert source.calls == [20]
        assert len(loader.rankings) == 1
        assert loader.last_updated_at is not None

    @pytest.mark.asyncio
    async def test_silent_load_flags(self, source):
        loader = SnapshotLoader(source, 20)
        task = loader.schedule(silent=True)

        assert loader.is_refreshing is True
        assert loader.is_loading is False

        await settle()
        source.resolve([])
        await task

        assert loader.is_refreshing is False

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_rankings(self, source):
        loader = SnapshotLoader(source, 20)
        task = loader.schedule()
        await settle()
        source.resolve(make_entries("Kim", "Lee", "Park"))
        await task
        before = loader.rankings
        stamp = loader.last_updated_at

        task = loader.schedule(silent=True)
        await settle()
        source.fail(httpx.ConnectError("down"))
        await task

        assert loader.rankings is before
        assert len(loader.rankings) == 3
        assert loader.last_updated_at == stamp
        assert isinstance(loader.error, httpx.ConnectError)
        assert loader.is_refreshing is False

    @pytest.mark.asyncio
    async def test_new_load_clears_error_at_start(self, source):
        loader = SnapshotLoader(source, 20)
        task = loader.schedule()
        await settle()
        source.fail(RuntimeError("boom"))
        await task
        assert loader.error is not None

        task = loader.schedule()
        assert loader.error is None
        await settle()
        source.resolve(make_entries("Kim"))
        await task
        assert loader.error is None

    @pytest.mark.asyncio
    async def test_non_sequence_result_becomes_empty(self, source):
        loader = SnapshotLoader(source, 20)
        task = loader.schedule()
        await settle()
        source.resolve({"unexpected": True})
        await task

        assert loader.rankings == ()
        assert loader.error is None

    @pytest.mark.asyncio
    async def test_last_write_wins(self, source):
        loader = SnapshotLoader(source, 20)
        slow = loader.schedule(silent=False)
        fast = loader.schedule(silent=True)
        await settle()

        slow_future, fast_future = source.pending
        fast_future.set_result(make_entries("Fresh"))
        await fast
        slow_future.set_result(make_entries("Old"))
        await slow

        assert loader.rankings[0].member_name == "Old"
        assert loader.is_loading is False
        assert loader.is_refreshing is False

    @pytest.mark.asyncio
    async def test_teardown_ignores_late_completion(self, source):
        changes = []
        loader = SnapshotLoader(source, 20, on_change=lambda: changes.append(loader.is_loading))
        task = loader.schedule()
        await settle()

        loader.teardown()
        count = len(changes)
        source.resolve(make_entries("Kim"))
        await task

        assert loader.rankings == ()
        assert loader.last_updated_at is None
        assert loader.is_loading is True
        assert len(changes) == count

    @pytest.mark.asyncio
    async def test_no_load_after_teardown(self, source):
        loader = SnapshotLoader(source, 20)
        loader.teardown()

        assert loader.schedule() is None
        await loader.load()
        assert source.calls == []
