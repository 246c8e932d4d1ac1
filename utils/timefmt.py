"""Human-relative rendering of stored UTC timestamps."""

from __future__ import annotations

from datetime import datetime

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR


def _phrase(seconds: float) -> str:
    if seconds < 45:
        return "a few seconds"
    if seconds < 90:
        return "a minute"
    if seconds < 45 * _MINUTE:
        return f"{round(seconds / _MINUTE)} minutes"
    if seconds < 90 * _MINUTE:
        return "an hour"
    if seconds < 22 * _HOUR:
        return f"{round(seconds / _HOUR)} hours"
    if seconds < 36 * _HOUR:
        return "a day"

    days = seconds / _DAY
    if days < 26:
        return f"{round(days)} days"
    if days < 46:
        return "a month"
    if days < 320:
        return f"{max(2, round(days / 30.4))} months"
    if days < 548:
        return "a year"
    return f"{max(2, round(days / 365.25))} years"


def humanize_since(moment: datetime | None, now: datetime | None = None) -> str | None:
    """Return phrases like ``"3 days ago"`` or ``"in an hour"``.

    Both datetimes are naive UTC, the way the models store them.
    """

    if moment is None:
        return None
    now = now or datetime.utcnow()
    delta = (now - moment).total_seconds()
    if delta >= 0:
        return f"{_phrase(delta)} ago"
    return f"in {_phrase(-delta)}"
