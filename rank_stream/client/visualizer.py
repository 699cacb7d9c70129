"""
MODULE OVERVIEW:
The Rich terminal leaderboard.

WHAT IS HAPPENING HERE:
We subscribe to the client's view and redraw a Layout with a podium, the full ranking
table and the stream health. The client does all the synchronization work; this module
only renders whatever `RankView` it was handed last.
"""

from rich.live import Live
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from collections import deque
from datetime import datetime
from typing import Optional
import asyncio

from rank_stream.client.rank_stream_client import RankStreamClient
from rank_stream.shared.models import RankEntry, RankView, StreamStatus
from rank_stream.shared.time_format import (
    format_seconds_to_clock,
    format_seconds_to_duration_label,
    format_timestamp,
)

STREAM_STATUS_LABELS = {
    StreamStatus.IDLE: "Waiting for the stream",
    StreamStatus.CONNECTING: "Connecting to live updates...",
    StreamStatus.OPEN: "Live updates on",
    StreamStatus.ERROR: "Connection lost, retrying",
    StreamStatus.UNSUPPORTED: "Live updates unavailable (snapshot only)",
}

STATUS_COLORS = {
    StreamStatus.OPEN: "green",
    StreamStatus.CONNECTING: "yellow",
    StreamStatus.IDLE: "yellow",
}

def display_rank(entry: RankEntry, index: int) -> int:
    return entry.rank if entry.rank is not None else index + 1

def podium_slots(rankings) -> list[tuple[str, Optional[RankEntry]]]:
    """Top three arranged the way the podium is drawn: 2nd, 1st, 3rd."""
    top = list(rankings[:3]) + [None] * (3 - min(len(rankings), 3))
    return [("2nd", top[1]), ("1st", top[0]), ("3rd", top[2])]

def build_rank_table(rankings) -> Table:
    table = Table(title="Play-Time Ranking", expand=True)
    table.add_column("Rank", justify="right", style="cyan", no_wrap=True)
    table.add_column("Member", style="magenta")
    table.add_column("Play Time", style="green")
    table.add_column("", style="blue")

    for index, entry in enumerate(rankings):
        member = entry.member_name or "Unknown"
        remark = entry.member_remark or "PUBG Player"
        table.add_row(
            f"#{display_rank(entry, index)}",
            f"{member}\n[dim]{remark}[/]",
            format_seconds_to_clock(entry.total_play_time),
            format_seconds_to_duration_label(entry.total_play_time),
        )
    return table

class Visualizer:
    def __init__(self, client: RankStreamClient):
        self.client = client
        self.view = client.view
        self.timeline = deque(maxlen=5)
        self._last_status: Optional[StreamStatus] = None

    def on_view(self, view: RankView):
        self.view = view
        if view.stream_status is not self._last_status:
            self._last_status = view.stream_status
            ts = datetime.now().strftime("%H:%M:%S")
            self.timeline.appendleft(f"[{ts}] Stream: {view.stream_status.value}")

    def generate_layout(self) -> Layout:
        view = self.view
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="podium", size=5),
            Layout(name="main")
        )
        layout["main"].split_row(
            Layout(name="left", ratio=2),
            Layout(name="right", ratio=1)
        )
        layout["right"].split_column(
            Layout(name="stats"),
            Layout(name="timeline")
        )

        # Header
        color = STATUS_COLORS.get(view.stream_status, "red")
        label = STREAM_STATUS_LABELS.get(view.stream_status, STREAM_STATUS_LABELS[StreamStatus.IDLE])
        if view.last_updated_at:
            updated = f"Last snapshot {format_timestamp(view.last_updated_at.astimezone())}"
        else:
            updated = "Loading snapshot..."
        layout["header"].update(Panel(f"[{color} bold]{label}[/] · {updated}", style=color))

        # Podium
        podium = Table.grid(expand=True)
        for _ in range(3):
            podium.add_column(justify="center")
        podium.add_row(*[
            f"[bold]{place}[/]\n{(entry.member_name or 'Unknown') if entry else '-'}\n"
            f"{format_seconds_to_clock(entry.total_play_time) if entry else ''}"
            for place, entry in podium_slots(view.rankings)
        ])
        layout["podium"].update(Panel(podium, title="Podium"))

        # Table
        if view.is_loading:
            body = "Loading rankings..."
        elif view.error is not None and not view.rankings:
            body = f"[red]Could not load rankings: {view.error}[/]"
        elif not view.rankings:
            body = "No ranking data yet."
        else:
            body = build_rank_table(view.rankings)
        layout["left"].update(Panel(body, title="Ranking"))

        # Stats
        stats_text = (
            f"Rows: {len(view.rankings)}\n"
            f"Refreshing: {'yes' if view.is_refreshing else 'no'}\n"
            f"Reconnects: {self.client.reconnect.reconnect_count}\n"
            f"Error: {view.error if view.error is not None else '-'}"
        )
        layout["stats"].update(Panel(stats_text, title="Sync Stats"))

        # Timeline
        layout["timeline"].update(Panel("\n".join(self.timeline), title="Timeline"))

        return layout

    async def run(self, duration_s: float):
        unsubscribe = self.client.subscribe(self.on_view)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + duration_s

        try:
            self.client.start()
            with Live(self.generate_layout(), refresh_per_second=4) as live:
                while loop.time() < deadline:
                    live.update(self.generate_layout())
                    await asyncio.sleep(0.25)
        finally:
            unsubscribe()
            await self.client.aclose()
