from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def parse_dt(value: Any) -> Optional[datetime]:
    """
    Parse provider timestamps into naive UTC datetimes (the storage convention).
    Accepts ISO strings (with or without offset / trailing Z), unix seconds and datetimes.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    return to_utc_naive(parsed)


def to_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        try:
            if isinstance(value, str):
                cleaned = value.replace("\\t", "").replace("\t", "").strip()
                out = float(cleaned)
            else:
                return None
        except ValueError:
            return None
    if not math.isfinite(out):
        return None
    return out


def safe_int(val: Any) -> Optional[int]:
    if val is None or isinstance(val, bool):
        return None
    try:
        return int(val)
    except (TypeError, ValueError):
        try:
            return int(float(val))
        except (TypeError, ValueError, OverflowError):
            return None


def parse_csv_ints(raw: Optional[str]) -> List[int]:
    """
    Parse comma-separated ids into a list of ints, skipping blanks and junk.
    """
    if not raw:
        return []
    out: List[int] = []
    for piece in raw.split(","):
        piece = piece.strip()
        if not piece:
            continue
        try:
            out.append(int(piece))
        except ValueError:
            continue
    return out


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_dict(value: Any) -> Dict[str, Any]:
    """
    Nested provider objects: anything that is not a dict reads as empty.
    """
    return value if isinstance(value, dict) else {}
