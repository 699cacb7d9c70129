"""
MODULE OVERVIEW:
The two contracts the ranking client consumes: the snapshot and the update stream.
"""
import json
import uuid
from fastapi import APIRouter, Query, Request
from sse_starlette.sse import EventSourceResponse

from rank_stream.server.rank_board import board
from rank_stream.shared.config import settings

MAX_PAGE_SIZE = 100

router = APIRouter()

@router.get("/api/rank")
async def get_rankings(count: int = Query(20, ge=1)):
    # Oversized pages are clamped, not rejected
    return {"data": board.snapshot(min(count, MAX_PAGE_SIZE))}

@router.get("/api/rank/stream")
async def rank_stream(request: Request, client_id: str | None = Query(None)):
    cid = client_id or f"client-{str(uuid.uuid4())[:4]}"
    queue = board.subscribe_sse(cid)

    async def event_publisher():
        try:
            yield {"event": "INIT", "data": json.dumps({"version": board.version})}
            while True:
                notification = await queue.get()
                yield {
                    "event": "rank-update",
                    "id": str(notification["version"]),
                    "data": json.dumps(notification),
                }
        finally:
            board.unsubscribe_sse(cid)

    # sse-starlette sends `: ping` comments on this interval; they are not events
    return EventSourceResponse(event_publisher(), ping=int(settings.SSE_HEARTBEAT_INTERVAL_S))
