"""Reconcile a second copy of the hierarchy (import box, backup file, remote store).

Untrusted payloads are classified once by ``classify_payload`` into one of
FullHierarchy, SubjectList, PlainText or Unrecognized; the merge strategies
below only ever see an already-classified payload.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, List, Optional, Union

from models import AppState, Grade, Row, Settings, Subject, UserData
from models.settings import CREDENTIAL_FIELDS
from utils.sanitize import (
    as_mapping,
    generate_id,
    lookup,
    sanitize_categories,
    sanitize_grades,
    sanitize_library,
    sanitize_settings,
    sanitize_subjects,
    sanitize_target_date,
    sanitize_user_data,
)

logger = logging.getLogger(__name__)

SUBJECT_MARKER = "#"
LOAD_REQUEST = {"action": "load"}


class MergeOutcome(str, Enum):
    APPLIED = "applied"
    CONFIRMATION_REQUIRED = "confirmation_required"
    NOT_RECOGNIZED = "not_recognized"
    NO_ACTIVE_GRADE = "no_active_grade"
    NOTHING_IMPORTED = "nothing_imported"


class RemoteOutcome(str, Enum):
    APPLIED = "applied"
    NO_DATA = "no_data"
    TRANSPORT_ERROR = "transport_error"
    INVALID_FORMAT = "invalid_format"


@dataclass(frozen=True)
class FullHierarchy:
    grades: list
    requires_confirmation: ClassVar[bool] = True


@dataclass(frozen=True)
class SubjectList:
    subjects: list
    requires_confirmation: ClassVar[bool] = True


@dataclass(frozen=True)
class PlainText:
    text: str
    requires_confirmation: ClassVar[bool] = False


@dataclass(frozen=True)
class Unrecognized:
    reason: str
    requires_confirmation: ClassVar[bool] = False


ImportPayload = Union[FullHierarchy, SubjectList, PlainText, Unrecognized]


@dataclass(frozen=True)
class MergeResult:
    outcome: MergeOutcome
    grades: List[Grade]
    active_grade_id: Optional[str] = None
    active_subject_id: Optional[str] = None
    imported_count: int = 0
    message: str = ""


@dataclass(frozen=True)
class RemoteLoadResult:
    outcome: RemoteOutcome
    state: AppState
    active_grade_id: Optional[str] = None
    message: str = ""


def classify_payload(raw: Any) -> ImportPayload:
    """Decide which merge strategy an untrusted payload is for."""
    text = None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return Unrecognized("Payload is empty")
        try:
            data = json.loads(text)
        except (ValueError, RecursionError):
            return PlainText(text)
    else:
        data = raw

    if isinstance(data, list):
        if not data:
            return Unrecognized("Payload is an empty list")
        first = as_mapping(data[0])
        if first is not None:
            if "subjects" in first:
                return FullHierarchy(data)
            if "rows" in first and "name" in first:
                return SubjectList(data)
            if "id" in first:
                return FullHierarchy(data)
        return Unrecognized("List items are neither grades nor subjects")
    if text is not None and not isinstance(data, (dict, list)):
        # A bare number or quoted word typed into the import box is still a unit line.
        return PlainText(text)
    return Unrecognized(f"Unsupported payload of type {type(data).__name__}")


def describe_payload(payload: ImportPayload) -> str:
    if isinstance(payload, FullHierarchy):
        return f"Full backup with {len(payload.grades)} grade(s) will replace all current data"
    if isinstance(payload, SubjectList):
        return f"{len(payload.subjects)} subject(s) will be merged into the active grade"
    if isinstance(payload, PlainText):
        return "Text lines will be imported as study units"
    return payload.reason


def replace_hierarchy(payload: FullHierarchy) -> MergeResult:
    grades = sanitize_grades(payload.grades)
    return MergeResult(
        outcome=MergeOutcome.APPLIED,
        grades=grades,
        active_grade_id=grades[0].id if grades else None,
        imported_count=sum(len(s.rows) for g in grades for s in g.subjects),
    )


def _find_grade(grades: List[Grade], grade_id: Optional[str]) -> Optional[Grade]:
    if grade_id is None:
        return None
    return next((g for g in grades if g.id == grade_id), None)


def _replace_grade(grades: List[Grade], grade: Grade) -> List[Grade]:
    return [grade if g.id == grade.id else g for g in grades]


def _with_fresh_ids(rows: List[Row], taken: set) -> List[Row]:
    fresh = []
    for row in rows:
        if row.id in taken:
            row = row.model_copy(update={"id": generate_id("r")})
        taken.add(row.id)
        fresh.append(row)
    return fresh


def merge_subjects(grades: List[Grade], active_grade_id: Optional[str], payload: SubjectList) -> MergeResult:
    """Merge subjects into the active grade by exact name.

    A matching subject gets the incoming rows appended after its own rows
    (no content de-duplication); an unmatched subject is appended as a new
    sibling. Other grades and subjects are returned untouched.
    """
    grade = _find_grade(grades, active_grade_id)
    if grade is None:
        return MergeResult(
            outcome=MergeOutcome.NO_ACTIVE_GRADE,
            grades=grades,
            message="Select a grade before importing subjects",
        )
    incoming = sanitize_subjects(payload.subjects)
    subjects = list(grade.subjects)
    for subject in incoming:
        index = next((i for i, s in enumerate(subjects) if s.name == subject.name), None)
        if index is None:
            if subject.id in {s.id for s in subjects}:
                subject = subject.model_copy(update={"id": generate_id("s")})
            subjects.append(subject)
            continue
        existing = subjects[index]
        rows = _with_fresh_ids(subject.rows, {r.id for r in existing.rows})
        subjects[index] = existing.model_copy(update={"rows": existing.rows + rows})
    imported = sum(len(s.rows) for s in incoming)
    logger.info("Merged %d subject(s), %d row(s) into grade %s", len(incoming), imported, grade.id)
    return MergeResult(
        outcome=MergeOutcome.APPLIED,
        grades=_replace_grade(grades, grade.model_copy(update={"subjects": subjects})),
        active_grade_id=grade.id,
        imported_count=imported,
    )


def import_text(
    grades: List[Grade],
    active_grade_id: Optional[str],
    active_subject_id: Optional[str],
    text: str,
) -> MergeResult:
    """Import ``# Subject`` marker lines and unit lines into the active grade.

    Unit lines go to the subject named by the latest marker. Lines before any
    marker go to the selected subject, else the grade's first subject, else
    they are skipped.
    """
    grade = _find_grade(grades, active_grade_id)
    if grade is None:
        return MergeResult(
            outcome=MergeOutcome.NO_ACTIVE_GRADE,
            grades=grades,
            message="Select a grade before importing",
        )
    subjects = list(grade.subjects)
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]

    if any(s.id == active_subject_id for s in subjects):
        target_id = active_subject_id
    else:
        target_id = subjects[0].id if subjects else None
    selected_id = active_subject_id
    imported = 0

    for line in lines:
        if line.startswith(SUBJECT_MARKER):
            name = line[len(SUBJECT_MARKER):].strip()
            if not name:
                continue
            subject = next((s for s in subjects if s.name == name), None)
            if subject is None:
                subject = Subject(id=generate_id("s"), name=name)
                subjects.append(subject)
            target_id = selected_id = subject.id
            continue
        if target_id is None:
            continue
        index = next(i for i, s in enumerate(subjects) if s.id == target_id)
        row = Row(id=generate_id("r"), topic=line)
        subjects[index] = subjects[index].model_copy(update={"rows": subjects[index].rows + [row]})
        imported += 1

    changed = imported > 0 or len(subjects) != len(grade.subjects)
    if not changed:
        return MergeResult(
            outcome=MergeOutcome.NOTHING_IMPORTED,
            grades=grades,
            active_grade_id=grade.id,
            active_subject_id=active_subject_id,
            message="Nothing imported; start a subject with a line such as '# Math'",
        )
    return MergeResult(
        outcome=MergeOutcome.APPLIED,
        grades=_replace_grade(grades, grade.model_copy(update={"subjects": subjects})),
        active_grade_id=grade.id,
        active_subject_id=selected_id,
        imported_count=imported,
    )


def apply_import(
    grades: List[Grade],
    raw: Any,
    active_grade_id: Optional[str] = None,
    active_subject_id: Optional[str] = None,
    confirmed: bool = False,
) -> MergeResult:
    """Classify a payload and run its merge strategy.

    Destructive strategies need ``confirmed=True``; without it nothing is
    changed and CONFIRMATION_REQUIRED is returned with a description.
    """
    payload = classify_payload(raw)
    if isinstance(payload, Unrecognized):
        return MergeResult(outcome=MergeOutcome.NOT_RECOGNIZED, grades=grades, message=payload.reason)
    if payload.requires_confirmation and not confirmed:
        return MergeResult(
            outcome=MergeOutcome.CONFIRMATION_REQUIRED,
            grades=grades,
            active_grade_id=active_grade_id,
            active_subject_id=active_subject_id,
            message=describe_payload(payload),
        )
    if isinstance(payload, FullHierarchy):
        return replace_hierarchy(payload)
    if isinstance(payload, SubjectList):
        return merge_subjects(grades, active_grade_id, payload)
    return import_text(grades, active_grade_id, active_subject_id, payload.text)


def merge_settings(local: Settings, remote: Any) -> Settings:
    """Remote settings override local ones, except credentials a local copy already has."""
    if as_mapping(remote) is None:
        return local
    merged = sanitize_settings(remote, defaults=local)
    credentials = {name: getattr(local, name) or getattr(merged, name) for name in CREDENTIAL_FIELDS}
    return merged.model_copy(update=credentials)


def merge_user_data(local: UserData, remote: Any) -> UserData:
    """Keep the more progressed copy's counters; merge activity logs by day.

    EXP only ever grows, so the copy with more EXP carries the newer coin
    balance as well. Ties keep the local copy.
    """
    if as_mapping(remote) is None:
        return local
    incoming = sanitize_user_data(remote)
    leader = incoming if incoming.exp > local.exp else local
    days = set(local.logs) | set(incoming.logs)
    logs = {day: max(local.logs.get(day, 0), incoming.logs.get(day, 0)) for day in sorted(days)}
    return UserData(exp=leader.exp, coins=leader.coins, logs=logs)


def merge_remote_load(state: AppState, response: Any) -> RemoteLoadResult:
    """Apply a remote ``load`` response on top of the local state.

    ``data: null`` means the remote store is still empty. A payload without at
    least one usable grade is rejected as a whole.
    """
    body = as_mapping(response)
    if body is None:
        return RemoteLoadResult(RemoteOutcome.TRANSPORT_ERROR, state, message="Response is not an object")
    status = body.get("status")
    if status != "success":
        message = str(body.get("message") or f"Remote status {status!r}")
        return RemoteLoadResult(RemoteOutcome.TRANSPORT_ERROR, state, message=message)
    data = body.get("data")
    if data is None:
        return RemoteLoadResult(RemoteOutcome.NO_DATA, state, message="Remote store has no data yet")
    data = as_mapping(data)
    if data is None or not isinstance(data.get("grades"), list):
        logger.warning("Remote payload rejected: missing or invalid grades")
        return RemoteLoadResult(RemoteOutcome.INVALID_FORMAT, state, message="Remote data has no valid grades")

    grades = sanitize_grades(data["grades"])
    if not grades:
        logger.warning("Remote payload rejected: no usable grades")
        return RemoteLoadResult(RemoteOutcome.INVALID_FORMAT, state, message="Remote data has no grades")
    update = {
        "grades": grades,
        "settings": merge_settings(state.settings, data.get("settings")),
        "user_data": merge_user_data(state.user_data, lookup(data, "user_data")),
    }
    library = data.get("library")
    if library is not None:
        update["library"] = sanitize_library(library)
    categories = lookup(data, "library_categories")
    if categories is not None:
        update["library_categories"] = sanitize_categories(categories)
    target_date = lookup(data, "target_date")
    if target_date:
        update["target_date"] = sanitize_target_date(target_date)
    return RemoteLoadResult(
        RemoteOutcome.APPLIED,
        state.model_copy(update=update),
        active_grade_id=grades[0].id if grades else None,
    )


def build_save_payload(state: AppState) -> dict:
    """One-directional local -> remote snapshot."""
    return {"action": "save", "data": state.to_wire()}


def export_grades(grades: List[Grade]) -> str:
    return json.dumps([g.to_wire() for g in grades], ensure_ascii=False, indent=2)
