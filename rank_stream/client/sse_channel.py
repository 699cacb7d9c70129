"""
MODULE OVERVIEW:
The Server-Sent Events update channel.

WHAT IS HAPPENING HERE:
We use the HTTPX `stream()` context manager to keep the response body open and parse
the `event:` / `data:` / `id:` blocks ourselves, which is what a browser EventSource
does under the hood. A server that ends the stream is treated the same as a network
error: the owner hears about it through `on_error` and decides whether to reconnect.
"""
import asyncio
from typing import Callable, Optional

import httpx
from loguru import logger

from rank_stream.client.base_channel import ChannelFactory, UpdateChannel
from rank_stream.shared.models import StreamEvent

def parse_sse_block(block: str) -> Optional[StreamEvent]:
    """
    Parses one blank-line separated block. Comment lines (`: keepalive`) are skipped and
    a block without any `data:` line is not an event, so both yield None.
    """
    event_type = "message"
    event_id = None
    data_lines = []

    for line in block.split("\n"):
        if not line or line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            event_type = value or "message"
        elif field == "data":
            data_lines.append(value)
        elif field == "id":
            event_id = value

    if not data_lines:
        return None
    return StreamEvent(event=event_type, data="\n".join(data_lines), id=event_id)

class SSEChannel(UpdateChannel):
    protocol_name: str = "sse"

    def __init__(
        self,
        url: str,
        on_open: Callable[[], None],
        on_event: Callable[[StreamEvent], None],
        on_error: Callable[[Exception], None],
        client: httpx.AsyncClient,
        read_timeout_s: float = 60.0,
    ):
        super().__init__(url, on_open, on_event, on_error)
        self.client = client
        self.read_timeout_s = read_timeout_s
        self._task: Optional[asyncio.Task] = None

    def open(self) -> None:
        self._task = asyncio.create_task(self._run())

    def close(self) -> None:
        self.is_closed = True
        task, self._task = self._task, None
        # close() is also reached from inside our own error callback
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _run(self) -> None:
        try:
            await self._consume()
        except asyncio.CancelledError:
            raise
        except (httpx.HTTPError, OSError) as e:
            logger.warning(f"protocol=sse event=error url={self.url} reason='{e}'")
            self._emit_error(e)
        except Exception as e:
            # StreamError, decode faults and handler failures still end this connection
            logger.error(f"protocol=sse event=error url={self.url} reason='{e!r}'")
            self._emit_error(e)
        else:
            if self.is_closed:
                return
            logger.info(f"protocol=sse event=disconnect url={self.url} reason=server_closed")
            self._emit_error(ConnectionError("stream closed by server"))

    async def _consume(self) -> None:
        timeout = httpx.Timeout(10.0, read=self.read_timeout_s)
        headers = {"Accept": "text/event-stream", "Cache-Control": "no-cache"}

        async with self.client.stream("GET", self.url, headers=headers, timeout=timeout) as response:
            response.raise_for_status()
            logger.info(f"protocol=sse event=connect url={self.url}")
            self._emit_open()

            buffer = ""
            async for chunk in response.aiter_text():
                if self.is_closed:
                    return
                buffer += chunk.replace("\r\n", "\n")
                while "\n\n" in buffer:
                    block, buffer = buffer.split("\n\n", 1)
                    event = parse_sse_block(block)
                    if event is not None:
                        self._emit_event(event)

def sse_channel_factory(client: httpx.AsyncClient, read_timeout_s: float = 60.0) -> ChannelFactory:
    def factory(url, on_open, on_event, on_error) -> SSEChannel:
        return SSEChannel(url, on_open, on_event, on_error, client=client, read_timeout_s=read_timeout_s)
    return factory
