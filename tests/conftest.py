"""
Shared fakes for driving the ranking client without a network.
"""
import asyncio
from collections import deque

import pytest

from rank_stream.client.base_channel import UpdateChannel
from rank_stream.shared.models import RankEntry, StreamEvent


class FakeSource:
    """Snapshot source whose calls stay pending until the test settles them."""

    def __init__(self):
        self.calls = []
        self.pending = deque()

    async def get_rankings(self, count=None):
        self.calls.append(count)
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future

    def resolve(self, rows):
        self.pending.popleft().set_result(rows)

    def fail(self, error):
        self.pending.popleft().set_exception(error)

    def stream_url(self):
        return "http://rank.test/api/rank/stream"


class FakeChannel(UpdateChannel):
    protocol_name = "fake"

    def __init__(self, url, on_open, on_event, on_error):
        super().__init__(url, on_open, on_event, on_error)
        self.opened = False

    def open(self):
        self.opened = True

    def close(self):
        self.is_closed = True

    # Helpers that play the server side
    def handshake(self):
        self._emit_open()

    def push(self, event="rank-update", data="{}"):
        self._emit_event(StreamEvent(event=event, data=data))

    def fail(self, error=None):
        self._emit_error(error or ConnectionError("reset by peer"))


class FakeChannelFactory:
    def __init__(self):
        self.channels = []

    def __call__(self, url, on_open, on_event, on_error):
        channel = FakeChannel(url, on_open, on_event, on_error)
        self.channels.append(channel)
        return channel

    @property
    def latest(self):
        return self.channels[-1]

    def open_channels(self):
        return [c for c in self.channels if not c.is_closed]


async def settle(turns: int = 5):
    """Gives pending tasks a few loop turns to run."""
    for _ in range(turns):
        await asyncio.sleep(0)


def make_entries(*names):
    return [RankEntry(memberName=name, rank=i + 1, totalPlayTime=100 * (len(names) - i)) for i, name in enumerate(names)]


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def channel_factory():
    return FakeChannelFactory()
