from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Union

from models import Row
from utils.sanitize import parse_int

# (days if passing, days if failing) after each round that schedules a review.
ROUND_OFFSETS = {
    1: (3, 1),
    2: (7, 3),
}

# score field -> suggested-date field it drives
SUGGESTED_DATE_FIELDS = {
    "score1": "suggested_date2",
    "score2": "suggested_date3",
}

URGENT_WITHIN_DAYS = 1


@dataclass(frozen=True)
class ReviewUrgency:
    days_until: int
    urgent: bool
    label: str


def schedule_next(
    outcome_score: int,
    passing_score: int,
    reference_date: date,
    round_number: int = 1,
) -> date:
    """Next review date after a round's score is entered, anchored to the entry date."""
    pass_days, fail_days = ROUND_OFFSETS[round_number]
    days = pass_days if outcome_score >= passing_score else fail_days
    return reference_date + timedelta(days=days)


def suggested_date_patch(
    row: Row,
    field: str,
    new_value: str,
    passing_score: int,
    today: date,
) -> Dict[str, str]:
    """Patch for the cached suggested date when a score field changes.

    Only an unset -> set transition schedules a date; clearing the score
    clears it; editing an already-set score keeps the original anchor.
    """
    target = SUGGESTED_DATE_FIELDS.get(field)
    if target is None:
        return {}
    new_score = parse_int(new_value)
    if new_score is None:
        return {target: ""}
    if parse_int(getattr(row, field)) is not None and getattr(row, target):
        return {}
    round_number = int(field[-1])
    return {target: schedule_next(new_score, passing_score, today, round_number).isoformat()}


def _parse_date(value: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def review_urgency(suggested_date: str, now: Optional[Union[datetime, date]] = None) -> Optional[ReviewUrgency]:
    target = _parse_date(suggested_date)
    if target is None:
        return None
    if now is None:
        today = date.today()
    elif isinstance(now, datetime):
        today = now.date()
    else:
        today = now
    days_until = (target - today).days
    if days_until <= URGENT_WITHIN_DAYS:
        if days_until < 0:
            label = "overdue"
        elif days_until == 0:
            label = "today"
        else:
            label = "tomorrow"
        return ReviewUrgency(days_until=days_until, urgent=True, label=label)
    return ReviewUrgency(days_until=days_until, urgent=False, label=target.strftime("%m-%d"))
