"""Reference dates used to ground relative-date phrases in the prompt."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

# Process-wide anchor so "today" does not depend on the server locale.
REFERENCE_TIMEZONE = ZoneInfo("Asia/Kolkata")

_FRIDAY = 4  # datetime.weekday(): Monday == 0
_DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class DateContext:
    """Calendar anchors formatted as ``YYYY-MM-DD``."""

    today: str
    tomorrow: str
    next_friday: str


def days_until_next(weekday: int, current_weekday: int) -> int:
    """Days from *current_weekday* to the next *weekday*, never zero.

    On the target weekday itself the answer is a full week.
    """
    return (weekday - current_weekday + 7) % 7 or 7


def compute_date_context(now: datetime | None = None) -> DateContext:
    """Compute today, tomorrow and next Friday in the reference time zone.

    Args:
        now: The current instant. Aware values are converted to
            ``REFERENCE_TIMEZONE``; naive values are assumed to already be
            local to it. Defaults to the wall clock.

    Returns:
        A DateContext with the three anchor dates.
    """
    if now is None:
        now = datetime.now(REFERENCE_TIMEZONE)
    elif now.tzinfo is not None:
        now = now.astimezone(REFERENCE_TIMEZONE)

    today = now.date()
    next_friday = today + timedelta(days=days_until_next(_FRIDAY, today.weekday()))

    return DateContext(
        today=today.strftime(_DATE_FORMAT),
        tomorrow=(today + timedelta(days=1)).strftime(_DATE_FORMAT),
        next_friday=next_friday.strftime(_DATE_FORMAT),
    )
