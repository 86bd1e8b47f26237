"""Pure edits on the Grade -> Subject -> Row tree. Each returns a new grade list."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from models import Grade, Row, Subject
from models.grade import DEFAULT_GRADE_COLOR, DEFAULT_SUBJECT_COLOR
from utils.sanitize import generate_id


class NotFoundError(LookupError):
    pass


class LastGradeError(ValueError):
    pass


def find_grade(grades: List[Grade], grade_id: str) -> Grade:
    for grade in grades:
        if grade.id == grade_id:
            return grade
    raise NotFoundError(f"Grade {grade_id} not found")


def find_subject(grade: Grade, subject_id: str) -> Subject:
    for subject in grade.subjects:
        if subject.id == subject_id:
            return subject
    raise NotFoundError(f"Subject {subject_id} not found")


def find_row(subject: Subject, row_id: str) -> Row:
    for row in subject.rows:
        if row.id == row_id:
            return row
    raise NotFoundError(f"Row {row_id} not found")


def _move(items: list, from_index: int, to_index: int) -> list:
    if not (0 <= from_index < len(items)) or not (0 <= to_index < len(items)):
        raise IndexError(f"Cannot move item {from_index} to {to_index} in a list of {len(items)}")
    moved = list(items)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved


def _map_grade(grades: List[Grade], grade_id: str, fn: Callable[[Grade], Grade]) -> List[Grade]:
    find_grade(grades, grade_id)
    return [fn(g) if g.id == grade_id else g for g in grades]


def _map_subject(
    grades: List[Grade],
    grade_id: str,
    subject_id: str,
    fn: Callable[[Subject], Subject],
) -> List[Grade]:
    def update(grade: Grade) -> Grade:
        find_subject(grade, subject_id)
        subjects = [fn(s) if s.id == subject_id else s for s in grade.subjects]
        return grade.model_copy(update={"subjects": subjects})

    return _map_grade(grades, grade_id, update)


def add_grade(grades: List[Grade], name: str = "New term", color: str = DEFAULT_GRADE_COLOR) -> Tuple[List[Grade], Grade]:
    grade = Grade(id=generate_id("g"), name=name, color=color)
    return grades + [grade], grade


def rename_grade(grades: List[Grade], grade_id: str, name: Optional[str] = None, color: Optional[str] = None) -> List[Grade]:
    update = {k: v for k, v in (("name", name), ("color", color)) if v}
    return _map_grade(grades, grade_id, lambda g: g.model_copy(update=update))


def delete_grade(grades: List[Grade], grade_id: str) -> List[Grade]:
    """Drop a grade and everything under it; the last grade cannot be deleted."""
    find_grade(grades, grade_id)
    if len(grades) <= 1:
        raise LastGradeError("At least one grade must remain")
    return [g for g in grades if g.id != grade_id]


def move_grade(grades: List[Grade], from_index: int, to_index: int) -> List[Grade]:
    return _move(grades, from_index, to_index)


def add_subject(
    grades: List[Grade],
    grade_id: str,
    name: str = "New subject",
    color: str = DEFAULT_SUBJECT_COLOR,
) -> Tuple[List[Grade], Subject]:
    subject = Subject(id=generate_id("s"), name=name, color=color)
    updated = _map_grade(
        grades, grade_id, lambda g: g.model_copy(update={"subjects": g.subjects + [subject]})
    )
    return updated, subject


def rename_subject(
    grades: List[Grade],
    grade_id: str,
    subject_id: str,
    name: Optional[str] = None,
    color: Optional[str] = None,
) -> List[Grade]:
    update = {k: v for k, v in (("name", name), ("color", color)) if v}
    return _map_subject(grades, grade_id, subject_id, lambda s: s.model_copy(update=update))


def delete_subject(grades: List[Grade], grade_id: str, subject_id: str) -> List[Grade]:
    def update(grade: Grade) -> Grade:
        find_subject(grade, subject_id)
        return grade.model_copy(update={"subjects": [s for s in grade.subjects if s.id != subject_id]})

    return _map_grade(grades, grade_id, update)


def move_subject(grades: List[Grade], grade_id: str, from_index: int, to_index: int) -> List[Grade]:
    return _map_grade(
        grades,
        grade_id,
        lambda g: g.model_copy(update={"subjects": _move(g.subjects, from_index, to_index)}),
    )


def add_row(grades: List[Grade], grade_id: str, subject_id: str, topic: str = "") -> Tuple[List[Grade], Row]:
    row = Row(id=generate_id("r"), topic=topic)
    updated = _map_subject(
        grades, grade_id, subject_id, lambda s: s.model_copy(update={"rows": s.rows + [row]})
    )
    return updated, row


def update_row(
    grades: List[Grade],
    grade_id: str,
    subject_id: str,
    row_id: str,
    patch: Dict[str, Any],
) -> List[Grade]:
    def update(subject: Subject) -> Subject:
        find_row(subject, row_id)
        rows = [r.model_copy(update=patch) if r.id == row_id else r for r in subject.rows]
        return subject.model_copy(update={"rows": rows})

    return _map_subject(grades, grade_id, subject_id, update)


def delete_row(grades: List[Grade], grade_id: str, subject_id: str, row_id: str) -> List[Grade]:
    def update(subject: Subject) -> Subject:
        find_row(subject, row_id)
        return subject.model_copy(update={"rows": [r for r in subject.rows if r.id != row_id]})

    return _map_subject(grades, grade_id, subject_id, update)


def move_row(grades: List[Grade], grade_id: str, subject_id: str, from_index: int, to_index: int) -> List[Grade]:
    return _map_subject(
        grades,
        grade_id,
        subject_id,
        lambda s: s.model_copy(update={"rows": _move(s.rows, from_index, to_index)}),
    )
