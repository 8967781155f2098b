from __future__ import annotations

from datetime import date, datetime
from typing import Any

from ..core.exceptions import ValidationError


def parse_iso_datetime(value: Any, field_name: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive local datetime.

    Aware values (e.g. '2026-10-18T09:00:00Z' from a browser) are converted to
    local time first, because the store keeps naive DATETIME columns.
    """

    if isinstance(value, datetime):
        parsed = value
    else:
        if not value or not isinstance(value, str):
            raise ValidationError(f"{field_name} is required")
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"{field_name} is not a valid ISO datetime")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def month_bounds(month: int, year: int) -> tuple[datetime, datetime]:
    """Half-open [start, end) range covering one calendar month."""

    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def iso(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
