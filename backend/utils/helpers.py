"""Helper utility functions for the backend"""
import json
from datetime import datetime, timezone
from typing import Any, Optional


def utc_now_iso(now: Optional[datetime] = None) -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix

    e.g. "2025-01-11T10:30:00.123Z"
    """
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def compact_json(data: Any) -> str:
    """Serialize without whitespace, keeping non-ASCII characters as-is"""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
