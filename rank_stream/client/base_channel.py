from abc import ABC, abstractmethod
from typing import Callable, Protocol

from rank_stream.shared.models import StreamEvent

class UpdateChannel(ABC):
    """
    One push connection. Subclasses call `_emit_open`, `_emit_event` and `_emit_error`;
    once `close()` has run, none of them reaches the owner any more.
    """
    protocol_name: str = "unknown"

    def __init__(
        self,
        url: str,
        on_open: Callable[[], None],
        on_event: Callable[[StreamEvent], None],
        on_error: Callable[[Exception], None],
    ):
        self.url = url
        self.on_open_callback = on_open
        self.on_event_callback = on_event
        self.on_error_callback = on_error

        self.events_received = 0
        self.is_closed = False

    def _emit_open(self) -> None:
        if not self.is_closed:
            self.on_open_callback()

    def _emit_event(self, event: StreamEvent) -> None:
        if self.is_closed:
            return
        self.events_received += 1
        self.on_event_callback(event)

    def _emit_error(self, error: Exception) -> None:
        if not self.is_closed:
            self.on_error_callback(error)

    @abstractmethod
    def open(self) -> None:
        """Starts the connection attempt without waiting for the handshake."""
        pass

    @abstractmethod
    def close(self) -> None:
        pass

class ChannelFactory(Protocol):
    def __call__(
        self,
        url: str,
        on_open: Callable[[], None],
        on_event: Callable[[StreamEvent], None],
        on_error: Callable[[Exception], None],
    ) -> UpdateChannel: ...
