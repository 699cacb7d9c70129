"""
MODULE OVERVIEW:
The ranking snapshot source: a thin HTTPX wrapper around `GET /api/rank`.

WHAT IS HAPPENING HERE:
The backend has shipped three response shapes over time (a bare array, `{"data": [...]}`
and `{"data": {"items": [...]}}`). We accept all of them and normalize anything else to
an empty list instead of raising. Network errors and non-2xx statuses are NOT caught
here; the snapshot loader records them as its error state.
"""
from typing import Any, Optional
from urllib.parse import urljoin

import httpx
from loguru import logger

from rank_stream.shared.config import settings
from rank_stream.shared.models import RankEntry

RANK_PATH = "/api/rank"
STREAM_PATH = "/api/rank/stream"
FALLBACK_BASE_URL = "http://localhost:3001"

def normalize_response(payload: Any) -> list:
    if not payload:
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("items"), list):
            return data["items"]
    return []

def to_rank_entries(items: list) -> list[RankEntry]:
    entries = []
    for position, item in enumerate(items):
        entry = RankEntry.from_payload(item, position)
        if entry is None:
            logger.debug(f"protocol=rest event=skip_row position={position} reason=not_an_object")
            continue
        entries.append(entry)
    return entries

def build_stream_url(base_url: Optional[str]) -> str:
    """Absolute stream URL under `base_url`, or the relative path when no base is configured."""
    base = (base_url or "").strip()
    if not base:
        return STREAM_PATH
    if not base.startswith(("http://", "https://")):
        return STREAM_PATH
    return urljoin(base, STREAM_PATH)

class RankService:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (settings.API_BASE_URL if base_url is None else base_url).strip()
        self.client = client or httpx.AsyncClient(
            base_url=self.base_url or FALLBACK_BASE_URL,
            timeout=timeout_s if timeout_s is not None else settings.API_TIMEOUT_S,
        )

    async def get_rankings(self, count: Optional[int] = None) -> list[RankEntry]:
        params = {"count": count} if count else None
        response = await self.client.get(RANK_PATH, params=params)
        response.raise_for_status()
        return to_rank_entries(normalize_response(response.json()))

    def stream_url(self) -> str:
        return build_stream_url(self.base_url)

    async def aclose(self) -> None:
        await self.client.aclose()
