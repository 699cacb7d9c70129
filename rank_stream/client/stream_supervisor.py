"""
MODULE OVERVIEW:
Owns the lifecycle of the ranking update stream.

WHAT IS HAPPENING HERE:
The supervisor holds zero or one live channel. `start()` always tears down the previous
channel and any pending reconnect before opening a new one, so overlapping starts can
never leave two connections running. Every handler is bound to the connection that
created it; callbacks arriving from a replaced or closed connection are dropped.

Push events are change signals only. Whatever the payload says, we answer it by asking
for a silent snapshot reload.
"""
import json
from functools import partial
from typing import Callable, Optional

from loguru import logger

from rank_stream.client.base_channel import ChannelFactory, UpdateChannel
from rank_stream.client.reconnect import ReconnectPolicy
from rank_stream.client.status import StreamStatusModel
from rank_stream.shared.models import StreamEvent

INIT_EVENT = "INIT"
UPDATE_EVENT = "rank-update"

class StreamSupervisor:
    def __init__(
        self,
        stream_url: str,
        channel_factory: Optional[ChannelFactory],
        reconnect: ReconnectPolicy,
        status: StreamStatusModel,
        on_update: Callable[[], None],
    ):
        self.stream_url = stream_url
        self.channel_factory = channel_factory
        self.reconnect = reconnect
        self.status = status
        self.on_update = on_update

        self.connection_attempts = 0
        self.is_torn_down = False
        self._channel: Optional[UpdateChannel] = None
        self._token: Optional[object] = None

    @property
    def is_supported(self) -> bool:
        return self.channel_factory is not None

    @property
    def channel(self) -> Optional[UpdateChannel]:
        return self._channel

    def start(self) -> None:
        if self.is_torn_down:
            return
        if not self.is_supported:
            logger.warning(f"protocol=sse event=unsupported url={self.stream_url}")
            self.status.mark_unsupported()
            return

        self.reconnect.cancel()
        self._close_channel()
        self.status.begin_connect()

        token = object()
        self._token = token
        self.connection_attempts += 1
        channel = self.channel_factory(
            self.stream_url,
            partial(self._handle_open, token),
            partial(self._handle_event, token),
            partial(self._handle_error, token),
        )
        self._channel = channel
        channel.open()

    def stop(self) -> None:
        self.is_torn_down = True
        self.reconnect.shutdown()
        self._close_channel()

    def _is_current(self, token: object) -> bool:
        return not self.is_torn_down and token is self._token

    def _handle_open(self, token: object) -> None:
        if self._is_current(token):
            self.status.mark_open()

    def _handle_event(self, token: object, event: StreamEvent) -> None:
        if not self._is_current(token):
            return
        if event.event == INIT_EVENT:
            # Some transports deliver INIT before (or instead of) the open callback
            self.status.mark_open()
            return

        try:
            json.loads(event.data)
        except (ValueError, RecursionError):
            logger.debug(f"protocol=sse event=malformed_payload type={event.event}")
        self.on_update()

    def _handle_error(self, token: object, error: Exception) -> None:
        if not self._is_current(token):
            return
        logger.warning(f"protocol=sse event=stream_error url={self.stream_url} reason='{error}'")
        self.status.mark_error()
        self._close_channel()
        self.reconnect.schedule(self.start)

    def _close_channel(self) -> None:
        channel, self._channel = self._channel, None
        self._token = None
        if channel is not None:
            channel.close()
