from datetime import date

from models import Grade, Row, Subject
from utils.stats import days_until, progress_stats, subject_pass_rates, weak_rows


def _grades():
    return [
        Grade(id="g1", name="Year 7", subjects=[
            Subject(id="s1", name="Math", rows=[
                Row(id="r1", topic="Fractions", score1="90"),
                Row(id="r2", topic="Decimals", score1="50"),
                Row(id="r3", topic="Ratios", score1="40", score2="85"),
                Row(id="r4", topic="Angles"),
            ]),
        ]),
        Grade(id="g2", name="Year 8", subjects=[
            Subject(id="s2", name="Science", rows=[Row(id="r5", topic="Atoms", score1="30", score2="60")]),
        ]),
    ]


def test_progress_stats_counts_passed_and_warning():
    assert progress_stats(_grades(), 80) == {"total": 5, "passed": 2, "warning": 1}


def test_weak_rows_failed_first_round_not_yet_recovered():
    assert [w.row.id for w in weak_rows(_grades(), 80)] == ["r2", "r5"]
    assert [w.row.id for w in weak_rows(_grades(), 80, grade_id="g2")] == ["r5"]
    assert weak_rows(_grades(), 80)[1].subject_name == "Science"


def test_subject_pass_rates():
    rates = subject_pass_rates(_grades()[0], 80)
    assert rates == [{"subject_id": "s1", "subject": "Math", "total": 4, "passed": 2, "percent": 50.0}]
    assert subject_pass_rates(Grade(id="g", name="Empty", subjects=[Subject(id="s", name="X")]), 80)[0]["percent"] == 0.0


def test_days_until_target():
    today = date(2024, 5, 1)
    assert days_until("2024-05-11", today) == 10
    assert days_until("2024-04-30", today) == -1
    assert days_until("", today) is None
    assert days_until("someday", today) is None
