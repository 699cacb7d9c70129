"""
MODULE OVERVIEW:
The stream status state machine.

WHAT IS HAPPENING HERE:
Instead of letting handlers assign status strings ad hoc, every change goes through a
named transition. `unsupported` is terminal: once the runtime has been found unable to
open a push channel, no later transition can leave it.
"""
from typing import Callable, Optional

from loguru import logger

from rank_stream.shared.models import StreamStatus

class StreamStatusModel:
    def __init__(self, on_change: Optional[Callable[[StreamStatus], None]] = None):
        self.current = StreamStatus.IDLE
        self.on_change = on_change

    def begin_connect(self) -> None:
        self._move(StreamStatus.CONNECTING)

    def mark_open(self) -> None:
        self._move(StreamStatus.OPEN)

    def mark_error(self) -> None:
        self._move(StreamStatus.ERROR)

    def mark_unsupported(self) -> None:
        self._move(StreamStatus.UNSUPPORTED)

    def _move(self, status: StreamStatus) -> None:
        if self.current is StreamStatus.UNSUPPORTED or self.current is status:
            return
        logger.debug(f"protocol=sse event=status from={self.current.value} to={status.value}")
        self.current = status
        if self.on_change:
            self.on_change(status)
