"""
MODULE OVERVIEW:
The composition root: one live leaderboard view backed by a snapshot loader and an
update stream.

WHAT IS HAPPENING HERE:
`start()` kicks off one foreground snapshot load and opens the update stream. Every
push event turns into a silent reload. Every internal change re-derives a frozen
`RankView` and hands it to the subscribed listeners.

`stop()` is the cancellation discipline of the whole client: it cancels the pending
reconnect, closes the stream and flips the torn-down guard that every late
continuation (a load settling, a stream callback firing) checks before touching state.
"""
import asyncio
from typing import Callable, Optional

from loguru import logger

from rank_stream.client.base_channel import ChannelFactory
from rank_stream.client.rank_service import RankService, build_stream_url
from rank_stream.client.reconnect import ReconnectPolicy
from rank_stream.client.snapshot_loader import SnapshotLoader, SnapshotSource
from rank_stream.client.sse_channel import sse_channel_factory
from rank_stream.client.status import StreamStatusModel
from rank_stream.client.stream_supervisor import StreamSupervisor
from rank_stream.shared.config import settings
from rank_stream.shared.models import RankView

ViewListener = Callable[[RankView], None]

class RankStreamClient:
    def __init__(
        self,
        source: SnapshotSource,
        channel_factory: Optional[ChannelFactory],
        page_size: Optional[int] = None,
        reconnect_delay_s: Optional[float] = None,
        stream_url: Optional[str] = None,
        owns_source: bool = False,
    ):
        self.source = source
        self.owns_source = owns_source
        if stream_url is None:
            stream_url = source.stream_url() if hasattr(source, "stream_url") else build_stream_url(settings.API_BASE_URL)

        self.listeners: list[ViewListener] = []
        self.is_started = False
        self.is_torn_down = False
        self._tasks: set[asyncio.Task] = set()
        self._view = RankView()

        self.status = StreamStatusModel(on_change=lambda _status: self._publish())
        self.loader = SnapshotLoader(
            source,
            settings.RANK_PAGE_SIZE if page_size is None else page_size,
            on_change=self._publish,
        )
        self.reconnect = ReconnectPolicy(reconnect_delay_s)
        self.supervisor = StreamSupervisor(
            stream_url,
            channel_factory,
            self.reconnect,
            self.status,
            on_update=self._on_stream_update,
        )

    @property
    def view(self) -> RankView:
        return self._view

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)
        return unsubscribe

    def start(self) -> None:
        """Must be called from inside a running event loop."""
        if self.is_started or self.is_torn_down:
            return
        self.is_started = True
        logger.info(f"protocol=rest event=start page_size={self.loader.page_size} stream={self.supervisor.stream_url}")
        self._track(self.loader.schedule(silent=False))
        self.supervisor.start()

    async def refresh(self) -> None:
        """Foreground reload on demand. Works whatever the stream status is."""
        await self.loader.load(silent=False)

    def stop(self) -> None:
        if self.is_torn_down:
            return
        self.is_torn_down = True
        self.loader.teardown()
        self.supervisor.stop()
        logger.info("protocol=sse event=stop reason=teardown")

    async def aclose(self) -> None:
        self.stop()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if self.owns_source and hasattr(self.source, "aclose"):
            await self.source.aclose()

    async def __aenter__(self) -> "RankStreamClient":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _on_stream_update(self) -> None:
        self._track(self.loader.schedule(silent=True))

    def _track(self, task: Optional[asyncio.Task]) -> None:
        if task is None:
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _publish(self) -> None:
        if self.is_torn_down:
            return
        view = RankView(
            rankings=self.loader.rankings,
            is_loading=self.loader.is_loading,
            is_refreshing=self.loader.is_refreshing,
            error=self.loader.error,
            last_updated_at=self.loader.last_updated_at,
            stream_status=self.status.current,
        )
        self._view = view
        for listener in list(self.listeners):
            try:
                listener(view)
            except Exception as e:
                logger.error(f"Error in view listener: {e}")

def create_rank_stream_client(
    base_url: Optional[str] = None,
    page_size: Optional[int] = None,
    reconnect_delay_s: Optional[float] = None,
    enable_stream: bool = True,
) -> RankStreamClient:
    """Wires the HTTPX snapshot service and SSE channel from settings."""
    service = RankService(base_url=base_url)
    factory = sse_channel_factory(service.client) if enable_stream else None
    return RankStreamClient(
        service,
        factory,
        page_size=page_size,
        reconnect_delay_s=reconnect_delay_s,
        owns_source=True,
    )
