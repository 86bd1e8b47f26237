from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from models import Grade, Row
from models.grade import ROUNDS
from utils.status import is_passing, parse_score


@dataclass(frozen=True)
class LocatedRow:
    row: Row
    grade_id: str
    grade_name: str
    subject_id: str
    subject_name: str


def flatten_rows(grades: List[Grade]) -> List[LocatedRow]:
    return [
        LocatedRow(row, grade.id, grade.name, subject.id, subject.name)
        for grade in grades
        for subject in grade.subjects
        for row in subject.rows
    ]


def row_passed(row: Row, passing_score: int) -> bool:
    return any(is_passing(row.score(n), passing_score) for n in ROUNDS)


def _first_round_failed(row: Row, passing_score: int) -> bool:
    s1 = parse_score(row.score1)
    return s1 is not None and 0 < s1 < passing_score


def progress_stats(grades: List[Grade], passing_score: int) -> dict:
    """Totals for the dashboard: units, units passed in any round, units stuck after R1."""
    rows = [located.row for located in flatten_rows(grades)]
    warning = [
        r for r in rows
        if _first_round_failed(r, passing_score) and not r.score2 and not r.score3
    ]
    return {
        "total": len(rows),
        "passed": sum(1 for r in rows if row_passed(r, passing_score)),
        "warning": len(warning),
    }


def weak_rows(grades: List[Grade], passing_score: int, grade_id: Optional[str] = None) -> List[LocatedRow]:
    """Rows that failed R1 and have not yet passed R2."""
    weak = []
    for located in flatten_rows(grades):
        if grade_id is not None and located.grade_id != grade_id:
            continue
        row = located.row
        if not _first_round_failed(row, passing_score):
            continue
        if is_passing(row.score2, passing_score):
            continue
        weak.append(located)
    return weak


def subject_pass_rates(grade: Grade, passing_score: int) -> List[dict]:
    rates = []
    for subject in grade.subjects:
        total = len(subject.rows)
        passed = sum(1 for r in subject.rows if row_passed(r, passing_score))
        rates.append({
            "subject_id": subject.id,
            "subject": subject.name,
            "total": total,
            "passed": passed,
            "percent": round(passed / total * 100, 1) if total else 0.0,
        })
    return rates


def days_until(target_date: str, today: Optional[date] = None) -> Optional[int]:
    if not target_date:
        return None
    try:
        target = date.fromisoformat(target_date[:10])
    except ValueError:
        return None
    return (target - (today or date.today())).days
