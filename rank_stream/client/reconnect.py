"""
MODULE OVERVIEW:
Single-flight, fixed-delay reconnection.

WHAT IS HAPPENING HERE:
After any stream failure the supervisor asks for one reconnection attempt. We keep the
asyncio `TimerHandle` so that a second request before the delay elapses replaces the
first one instead of stacking a parallel timer. There is no backoff and no attempt cap:
the leaderboard keeps trying for as long as the client is alive.
"""
import asyncio
from typing import Callable, Optional

from loguru import logger

from rank_stream.shared.config import settings

class ReconnectPolicy:
    def __init__(self, delay_s: Optional[float] = None):
        self.delay_s = settings.STREAM_RECONNECT_DELAY_S if delay_s is None else delay_s
        if self.delay_s < 0:
            raise ValueError("reconnect delay must not be negative")
        self.reconnect_count = 0
        self._handle: Optional[asyncio.TimerHandle] = None
        self._is_shut_down = False

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, attempt_fn: Callable[[], None]) -> None:
        if self._is_shut_down:
            return
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay_s, self._fire, attempt_fn)
        logger.warning(f"protocol=sse event=reconnect_scheduled delay={self.delay_s:.2f}s")

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def shutdown(self) -> None:
        self._is_shut_down = True
        self.cancel()

    def _fire(self, attempt_fn: Callable[[], None]) -> None:
        self._handle = None
        if self._is_shut_down:
            return
        self.reconnect_count += 1
        logger.info(f"protocol=sse event=reconnect attempt={self.reconnect_count}")
        attempt_fn()
