"""
MODULE OVERVIEW:
The typed data structures shared by the ranking client, the dashboard and the demo
server, powered by Pydantic v2.

WHAT IS HAPPENING HERE:
`RankEntry` is one leaderboard row exactly as the snapshot endpoint describes it.
The server speaks camelCase, so every field carries an alias. The validators never
reject a row: one odd row must not fail a whole snapshot.
`RankView` is the read-only object handed to the UI layer after every state change.
"""
import math
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

class StreamStatus(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    ERROR = "error"
    UNSUPPORTED = "unsupported"

# One leaderboard row. Immutable once received; a new snapshot replaces all rows.
class RankEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    game_code: Optional[str] = Field(default=None, alias="gameCode")
    member_name: Optional[str] = Field(default=None, alias="memberName")
    member_remark: Optional[str] = Field(default=None, alias="memberRemark")
    rank: Optional[int] = None
    total_play_time: float = Field(default=0.0, alias="totalPlayTime")
    last_played_at: Optional[datetime] = Field(default=None, alias="lastPlayedAt")

    @field_validator("game_code", "member_name", "member_remark", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @field_validator("total_play_time", mode="before")
    @classmethod
    def _clamp_play_time(cls, value: Any) -> float:
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(seconds) or seconds < 0:
            return 0.0
        return seconds

    @field_validator("rank", "last_played_at", mode="wrap")
    @classmethod
    def _absent_when_invalid(cls, value: Any, handler):
        try:
            return handler(value)
        except ValidationError:
            return None

    @classmethod
    def from_payload(cls, item: Any, position: int) -> Optional["RankEntry"]:
        """
        Builds an entry from one element of the snapshot response.
        Returns None for elements that are not objects. When the server sent no
        rank, the 1-based position in the response is used instead.
        """
        if not isinstance(item, Mapping):
            return None
        entry = cls.model_validate(item)
        if entry.rank is None:
            entry = entry.model_copy(update={"rank": position + 1})
        return entry

# WHAT IS HAPPENING HERE:
# The composed, read-only result the rest of the application renders.
# A fresh instance is derived on every internal state change.
class RankView(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    rankings: tuple[RankEntry, ...] = ()
    is_loading: bool = False
    is_refreshing: bool = False
    error: Optional[Exception] = None
    last_updated_at: Optional[datetime] = None
    stream_status: StreamStatus = StreamStatus.IDLE

# One dispatched Server-Sent-Events block.
class StreamEvent(BaseModel):
    event: str = "message"
    data: str = ""
    id: Optional[str] = None
