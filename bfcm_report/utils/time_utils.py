"""
Date and time helpers for report windows.

Key concepts:
  - Comparison window: the same calendar window one year earlier.  A window
    touching Feb 29 maps onto Feb 28 of the prior year.
  - Window length is inclusive of both endpoints (Nov 28 → Dec 1 is 4 days).
  - Peak-minute timestamps arrive as ISO-8601 strings from the sources; the
    hour used for "night owl" style classification is read either on the
    timestamp's own clock or after conversion to a configured timezone.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def shift_year_back(d: date) -> date:
    """Return the same calendar day one year earlier (Feb 29 → Feb 28)."""
    try:
        return d.replace(year=d.year - 1)
    except ValueError:
        return d.replace(year=d.year - 1, day=28)


def comparison_window(start: date, end: date) -> tuple[date, date]:
    """Return the prior-year window matching ``start``..``end``."""
    return shift_year_back(start), shift_year_back(end)


def window_length_days(start: date, end: date) -> int:
    """Inclusive number of days covered by ``start``..``end``."""
    return (end - start).days + 1


def validate_window(start: date, end: date, max_days: int) -> None:
    """Reject reversed or over-long report windows.

    Raises:
        ValueError: If ``start > end`` or the window exceeds ``max_days``.
    """
    if start > end:
        raise ValueError(f"start_date {start} is after end_date {end}.")
    length = window_length_days(start, end)
    if length > max_days:
        raise ValueError(
            f"Date range of {length} days exceeds the maximum of {max_days} days."
        )


def parse_peak_minute(value: str) -> Optional[datetime]:
    """Parse a peak-minute timestamp string, returning ``None`` if unparseable.

    Accepts ISO-8601 with or without offset, a trailing ``Z``, and the
    ``"YYYY-MM-DD HH:MM:SS UTC"`` form some warehouses emit.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(" UTC"):
        text = text[:-4] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def peak_clock(value: str, tz_name: Optional[str] = None) -> Optional[tuple[int, int]]:
    """Return ``(hour, minute)`` of a peak-minute timestamp.

    Args:
        value:   Timestamp string from the peak-GMV source.
        tz_name: IANA timezone to convert into.  Naive timestamps are taken
                 as UTC before conversion.  ``None`` keeps the timestamp's
                 own clock.

    Returns:
        ``(hour, minute)`` or ``None`` when the timestamp cannot be parsed.
    """
    parsed = parse_peak_minute(value)
    if parsed is None:
        return None
    if tz_name:
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        parsed = parsed.astimezone(ZoneInfo(tz_name))
    return parsed.hour, parsed.minute
