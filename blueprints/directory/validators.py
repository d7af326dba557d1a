from __future__ import annotations
from datetime import datetime

def ensure_iso_date(value: str) -> str:
    """'YYYY-MM-DD' -> та же строка; иначе ValueError."""
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValueError("date_of_birth must be YYYY-MM-DD") from None
    return value
