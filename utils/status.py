from enum import Enum
from typing import Optional

from models import Row
from utils.sanitize import parse_int


class Status(str, Enum):
    PREPARING = "preparing"
    NEEDS_SECOND_PASS = "needs_second_pass"
    REMEDIATION_SUCCESS = "remediation_success"
    PURSUING_EXCELLENCE = "pursuing_excellence"
    NEEDS_THIRD_PASS = "needs_third_pass"
    REVIVED_AT_THIRD_ATTEMPT = "revived_at_third_attempt"
    STUCK = "stuck"
    PERFECT = "perfect"
    ELITE_CHALLENGE = "elite_challenge"
    STUDY_MASTER = "study_master"


STATUS_LABELS = {
    Status.PREPARING: "Preparing",
    Status.NEEDS_SECOND_PASS: "Needs 2nd pass",
    Status.REMEDIATION_SUCCESS: "Remediation success",
    Status.PURSUING_EXCELLENCE: "Pursuing excellence",
    Status.NEEDS_THIRD_PASS: "Needs 3rd pass",
    Status.REVIVED_AT_THIRD_ATTEMPT: "Revived at R3",
    Status.STUCK: "Stuck",
    Status.PERFECT: "Perfect!",
    Status.ELITE_CHALLENGE: "Elite challenge",
    Status.STUDY_MASTER: "Study master",
}

URGENT_STATUSES = frozenset({Status.NEEDS_SECOND_PASS, Status.NEEDS_THIRD_PASS})


def parse_score(value: str) -> Optional[int]:
    """A stored score as an int, or None when unset or non-numeric."""
    return parse_int(value)


def is_passing(value: str, passing_score: int) -> bool:
    score = parse_score(value)
    return score is not None and score >= passing_score


def derive_status(row: Row, passing_score: int) -> Status:
    """Status from the three rounds' scores; evaluated on every read, never stored."""
    s1 = parse_score(row.score1)
    s2 = parse_score(row.score2)
    s3 = parse_score(row.score3)
    if s1 is None:
        return Status.PREPARING
    if s1 < passing_score:
        if s2 is None:
            return Status.NEEDS_SECOND_PASS
        if s2 >= passing_score:
            return Status.REMEDIATION_SUCCESS if s3 is None else Status.PURSUING_EXCELLENCE
        if s3 is None:
            return Status.NEEDS_THIRD_PASS
        return Status.REVIVED_AT_THIRD_ATTEMPT if s3 >= passing_score else Status.STUCK
    if s2 is None:
        return Status.PERFECT
    return Status.ELITE_CHALLENGE if s3 is None else Status.STUDY_MASTER


def status_label(status: Status) -> str:
    return STATUS_LABELS[status]


def is_urgent(status: Status) -> bool:
    return status in URGENT_STATUSES
