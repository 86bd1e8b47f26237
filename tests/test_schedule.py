from datetime import date, datetime

from models import Row
from utils.schedule import review_urgency, schedule_next, suggested_date_patch

REF = date(2024, 1, 1)


def test_schedule_next_after_first_round():
    assert schedule_next(85, 80, REF) == date(2024, 1, 4)
    assert schedule_next(60, 80, REF) == date(2024, 1, 2)


def test_schedule_next_after_second_round():
    assert schedule_next(85, 80, REF, round_number=2) == date(2024, 1, 8)
    assert schedule_next(60, 80, REF, round_number=2) == date(2024, 1, 4)


def test_patch_sets_date_when_score_first_entered():
    row = Row(id="r")
    assert suggested_date_patch(row, "score1", "90", 80, REF) == {"suggested_date2": "2024-01-04"}
    assert suggested_date_patch(row, "score2", "40", 80, REF) == {"suggested_date3": "2024-01-04"}
    assert suggested_date_patch(row, "score3", "90", 80, REF) == {}


def test_patch_keeps_original_anchor_when_score_edited():
    row = Row(id="r", score1="90", suggested_date2="2024-01-04")
    assert suggested_date_patch(row, "score1", "95", 80, date(2024, 1, 10)) == {}


def test_patch_clears_date_when_score_cleared():
    row = Row(id="r", score1="90", suggested_date2="2024-01-04")
    assert suggested_date_patch(row, "score1", "", 80, REF) == {"suggested_date2": ""}


def test_review_urgency_labels():
    today = date(2024, 3, 10)
    assert review_urgency("2024-03-08", today).label == "overdue"
    assert review_urgency("2024-03-10", today).label == "today"
    assert review_urgency("2024-03-11", datetime(2024, 3, 10, 23, 59)).label == "tomorrow"
    later = review_urgency("2024-03-15", today)
    assert later.urgent is False
    assert later.label == "03-15"
    assert later.days_until == 5
    assert review_urgency("", today) is None
    assert review_urgency("3/15", today) is None
