"""
Play-time and timestamp labels used by the leaderboard dashboard.
Invalid or negative durations are treated as zero.
"""
import math
from datetime import datetime
from typing import Any, Optional

def _clamp_seconds(value: Any) -> int:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(numeric) or numeric < 0:
        return 0
    return int(numeric)

def format_seconds_to_clock(seconds: Any) -> str:
    """3725 -> '01:02:05'. Hours are not wrapped at 24."""
    total = _clamp_seconds(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"

def format_seconds_to_duration_label(seconds: Any) -> str:
    """3725 -> '1h 2m 5s'. Zero parts are omitted, but zero itself reads '0s'."""
    total = _clamp_seconds(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)

def format_timestamp(value: Optional[Any]) -> str:
    if not value:
        return ""
    if isinstance(value, datetime):
        target = value
    else:
        try:
            target = datetime.fromisoformat(str(value))
        except ValueError:
            return ""
    return target.strftime("%H:%M:%S")
