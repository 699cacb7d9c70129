"""
MODULE OVERVIEW:
The demo server's in-memory leaderboard and its SSE fan-out.

WHAT IS HAPPENING HERE:
The board keeps cumulative play time per member. Every change bumps a version number
and is pushed to every open SSE subscriber queue as a `rank-update` notification. The
notification carries only the version and the member that changed; clients are
expected to fetch `/api/rank` again for the real numbers.
"""

import asyncio
from typing import Dict, Optional
from datetime import datetime, timezone
from loguru import logger

class RankBoard:
    def __init__(self):
        # game_code -> row in the wire (camelCase) shape
        self.members: Dict[str, dict] = {}

        # 🔵 SSE: one bounded queue per subscriber
        self.sse_queues: Dict[str, asyncio.Queue[dict]] = {}

        self.version = 0
        self.total_updates_dispatched = 0
        self.startup_time = datetime.now(timezone.utc)

    # ==========================
    # BOARD STATE
    # ==========================
    def add_member(self, game_code: str, member_name: str, member_remark: Optional[str] = None, total_play_time: int = 0):
        self.members[game_code] = {
            "gameCode": game_code,
            "memberName": member_name,
            "memberRemark": member_remark,
            "totalPlayTime": total_play_time,
            "lastPlayedAt": None,
        }

    def record_play(self, game_code: str, seconds: int) -> dict:
        row = self.members[game_code]
        row["totalPlayTime"] += max(0, int(seconds))
        row["lastPlayedAt"] = datetime.now(timezone.utc).isoformat()
        self.version += 1
        notification = {"version": self.version, "gameCode": game_code}
        self._broadcast_sse(notification)
        return notification

    def snapshot(self, count: int) -> list[dict]:
        ordered = sorted(self.members.values(), key=lambda r: r["totalPlayTime"], reverse=True)
        return [{**row, "rank": i + 1} for i, row in enumerate(ordered[:count])]

    # ==========================
    # SSE MANAGEMENT
    # ==========================
    def subscribe_sse(self, client_id: str) -> asyncio.Queue[dict]:
        # Size 100 keeps a slow subscriber from growing without bound
        queue: asyncio.Queue[dict] = asyncio.Queue(maxsize=100)
        self.sse_queues[client_id] = queue
        logger.info(f"client_id={client_id} protocol=sse event=connect reason=subscribed")
        return queue

    def unsubscribe_sse(self, client_id: str):
        if client_id in self.sse_queues:
            del self.sse_queues[client_id]
            logger.info(f"client_id={client_id} protocol=sse event=disconnect reason=cleanup")

    def _broadcast_sse(self, notification: dict):
        self.total_updates_dispatched += 1
        for client_id, queue in self.sse_queues.items():
            try:
                queue.put_nowait(notification)
            except asyncio.QueueFull:
                # Subscriber resyncs on its next notification
                logger.warning(f"client_id={client_id} protocol=sse event=dropped reason=queue_full")

    # ==========================
    # METRICS
    # ==========================
    def get_stats(self) -> dict:
        return {
            "members": len(self.members),
            "active_sse": len(self.sse_queues),
            "version": self.version,
            "total_updates_dispatched": self.total_updates_dispatched,
            "uptime_s": (datetime.now(timezone.utc) - self.startup_time).total_seconds(),
            "server_time": datetime.now(timezone.utc).isoformat(),
        }

# Global singleton instance
board = RankBoard()
