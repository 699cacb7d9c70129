"""
MODULE OVERVIEW:
Loads the ranking snapshot and tracks loading, error and freshness state.

WHAT IS HAPPENING HERE:
`load(silent=False)` drives the foreground spinner, `load(silent=True)` the background
"refreshing" hint. A failed load records the error but keeps the last good rankings
on screen (stale-while-error). Loads are not serialized: two may be in flight at
once and whichever finishes last wins.

Once `teardown()` has run, a load that settles later changes nothing.
"""
import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Sequence

from loguru import logger

from rank_stream.shared.models import RankEntry

class SnapshotSource(Protocol):
    async def get_rankings(self, count: Optional[int] = None) -> Sequence[RankEntry]: ...

class SnapshotLoader:
    def __init__(
        self,
        source: SnapshotSource,
        page_size: int,
        on_change: Optional[Callable[[], None]] = None,
    ):
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
            raise ValueError(f"page_size must be a positive integer, got {page_size!r}")
        self.source = source
        self.page_size = page_size
        self.on_change = on_change

        self.rankings: tuple[RankEntry, ...] = ()
        self.last_updated_at: Optional[datetime] = None
        self.is_loading = False
        self.is_refreshing = False
        self.error: Optional[Exception] = None
        self.is_torn_down = False

    def teardown(self) -> None:
        self.is_torn_down = True

    async def load(self, silent: bool = False) -> None:
        if self._begin(silent):
            await self._settle(silent)

    def schedule(self, silent: bool = False) -> Optional[asyncio.Task]:
        """
        Like `load`, but the loading flag is raised before returning and the fetch
        continues as a task. Returns None after teardown.
        """
        if not self._begin(silent):
            return None
        return asyncio.create_task(self._settle(silent))

    def _begin(self, silent: bool) -> bool:
        if self.is_torn_down:
            return False
        if silent:
            self.is_refreshing = True
        else:
            self.is_loading = True
        self.error = None
        self._notify()
        return True

    async def _settle(self, silent: bool) -> None:
        try:
            result = await self.source.get_rankings(self.page_size)
        except Exception as e:
            if not self.is_torn_down:
                logger.warning(f"protocol=rest event=snapshot_failed silent={silent} reason='{e}'")
                self.error = e
        else:
            if not self.is_torn_down:
                self.rankings = tuple(result) if isinstance(result, (list, tuple)) else ()
                self.last_updated_at = datetime.now(timezone.utc)
                self.error = None
                logger.debug(f"protocol=rest event=snapshot_loaded silent={silent} rows={len(self.rankings)}")
        finally:
            if not self.is_torn_down:
                if silent:
                    self.is_refreshing = False
                else:
                    self.is_loading = False
                self._notify()

    def _notify(self) -> None:
        if self.on_change:
            self.on_change()
