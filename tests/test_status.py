import pytest

from models import Row
from utils.status import Status, derive_status, is_urgent

PASSING = 80
UNSET, FAIL, PASS = "", "55", "90"


def _row(s1, s2, s3):
    return Row(id="r", score1=s1, score2=s2, score3=s3)


@pytest.mark.parametrize(
    "scores, expected",
    [
        ((UNSET, UNSET, UNSET), Status.PREPARING),
        ((UNSET, PASS, PASS), Status.PREPARING),
        ((FAIL, UNSET, UNSET), Status.NEEDS_SECOND_PASS),
        ((FAIL, UNSET, PASS), Status.NEEDS_SECOND_PASS),
        ((FAIL, PASS, UNSET), Status.REMEDIATION_SUCCESS),
        ((FAIL, PASS, FAIL), Status.PURSUING_EXCELLENCE),
        ((FAIL, PASS, PASS), Status.PURSUING_EXCELLENCE),
        ((FAIL, FAIL, UNSET), Status.NEEDS_THIRD_PASS),
        ((FAIL, FAIL, PASS), Status.REVIVED_AT_THIRD_ATTEMPT),
        ((FAIL, FAIL, FAIL), Status.STUCK),
        ((PASS, UNSET, UNSET), Status.PERFECT),
        ((PASS, UNSET, PASS), Status.PERFECT),
        ((PASS, FAIL, UNSET), Status.ELITE_CHALLENGE),
        ((PASS, PASS, UNSET), Status.ELITE_CHALLENGE),
        ((PASS, PASS, PASS), Status.STUDY_MASTER),
        ((PASS, FAIL, FAIL), Status.STUDY_MASTER),
    ],
)
def test_status_table(scores, expected):
    assert derive_status(_row(*scores), PASSING) == expected


def test_passing_score_tie_counts_as_pass():
    assert derive_status(_row("80", "", ""), PASSING) == Status.PERFECT
    assert derive_status(_row("79", "", ""), PASSING) == Status.NEEDS_SECOND_PASS


def test_non_numeric_score_is_unset_not_zero():
    assert derive_status(_row("abc", "", ""), PASSING) == Status.PREPARING
    assert derive_status(_row("50", "n/a", ""), PASSING) == Status.NEEDS_SECOND_PASS


def test_only_pending_retries_are_urgent():
    assert is_urgent(Status.NEEDS_SECOND_PASS)
    assert is_urgent(Status.NEEDS_THIRD_PASS)
    assert not is_urgent(Status.STUCK)
    assert not is_urgent(Status.PERFECT)
