from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from db.database import get_db
from models import Row
from models.requests import FieldUpdate, GradeCreate, MemoUpdate, MoveRequest, RenameRequest, RowCreate, SubjectCreate
from routes.state import read_state, write_state
from utils import hierarchy
from utils.hierarchy import LastGradeError, NotFoundError
from utils.ledger import FieldChange, apply_field_change, apply_to_user_data, resolve_field, save_memo
from utils.schedule import review_urgency
from utils.status import derive_status, is_urgent, status_label

router = APIRouter()


def row_view(row: Row, passing_score: int, today: Optional[date] = None) -> dict:
    """Row as stored plus its freshly derived status and review urgency."""
    derived = derive_status(row, passing_score)
    view = row.to_wire()
    view["status"] = derived.value
    view["statusLabel"] = status_label(derived)
    view["urgent"] = is_urgent(derived)
    for key, suggested in (("review2", row.suggested_date2), ("review3", row.suggested_date3)):
        urgency = review_urgency(suggested, today)
        view[key] = asdict(urgency) if urgency else None
    return view


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _bad_move(exc: IndexError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("")
async def list_grades(conn = Depends(get_db)):
    return [g.to_wire() for g in read_state(conn).grades]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_grade(data: GradeCreate, conn = Depends(get_db)):
    state = read_state(conn)
    kwargs = {"color": data.color} if data.color else {}
    grades, grade = hierarchy.add_grade(state.grades, data.name.strip() or "New term", **kwargs)
    write_state(conn, state.model_copy(update={"grades": grades}))
    return grade.to_wire()


@router.post("/move")
async def move_grade(move: MoveRequest, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        grades = hierarchy.move_grade(state.grades, move.from_index, move.to_index)
    except IndexError as exc:
        raise _bad_move(exc)
    write_state(conn, state.model_copy(update={"grades": grades}))
    return [g.id for g in grades]


@router.patch("/{grade_id}")
async def rename_grade(grade_id: str, data: RenameRequest, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        grades = hierarchy.rename_grade(state.grades, grade_id, data.name, data.color)
    except NotFoundError as exc:
        raise _not_found(exc)
    write_state(conn, state.model_copy(update={"grades": grades}))
    return hierarchy.find_grade(grades, grade_id).to_wire()


@router.delete("/{grade_id}")
async def delete_grade(grade_id: str, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        grades = hierarchy.delete_grade(state.grades, grade_id)
    except NotFoundError as exc:
        raise _not_found(exc)
    except LastGradeError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    write_state(conn, state.model_copy(update={"grades": grades}))
    return {"deleted": grade_id, "activeGradeId": grades[0].id}


@router.post("/{grade_id}/subjects", status_code=status.HTTP_201_CREATED)
async def create_subject(grade_id: str, data: SubjectCreate, conn = Depends(get_db)):
    state = read_state(conn)
    kwargs = {"color": data.color} if data.color else {}
    try:
        grades, subject = hierarchy.add_subject(state.grades, grade_id, data.name.strip() or "New subject", **kwargs)
    except NotFoundError as exc:
        raise _not_found(exc)
    write_state(conn, state.model_copy(update={"grades": grades}))
    return subject.to_wire()


@router.post("/{grade_id}/subjects/move")
async def move_subject(grade_id: str, move: MoveRequest, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        grades = hierarchy.move_subject(state.grades, grade_id, move.from_index, move.to_index)
    except NotFoundError as exc:
        raise _not_found(exc)
    except IndexError as exc:
        raise _bad_move(exc)
    write_state(conn, state.model_copy(update={"grades": grades}))
    return [s.id for s in hierarchy.find_grade(grades, grade_id).subjects]


@router.patch("/{grade_id}/subjects/{subject_id}")
async def rename_subject(grade_id: str, subject_id: str, data: RenameRequest, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        grades = hierarchy.rename_subject(state.grades, grade_id, subject_id, data.name, data.color)
    except NotFoundError as exc:
        raise _not_found(exc)
    write_state(conn, state.model_copy(update={"grades": grades}))
    return hierarchy.find_subject(hierarchy.find_grade(grades, grade_id), subject_id).to_wire()


@router.delete("/{grade_id}/subjects/{subject_id}")
async def delete_subject(grade_id: str, subject_id: str, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        grades = hierarchy.delete_subject(state.grades, grade_id, subject_id)
    except NotFoundError as exc:
        raise _not_found(exc)
    write_state(conn, state.model_copy(update={"grades": grades}))
    return {"deleted": subject_id}


@router.get("/{grade_id}/subjects/{subject_id}/rows")
async def list_rows(grade_id: str, subject_id: str, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        subject = hierarchy.find_subject(hierarchy.find_grade(state.grades, grade_id), subject_id)
    except NotFoundError as exc:
        raise _not_found(exc)
    return [row_view(row, state.settings.passing_score) for row in subject.rows]


@router.post("/{grade_id}/subjects/{subject_id}/rows", status_code=status.HTTP_201_CREATED)
async def create_row(grade_id: str, subject_id: str, data: RowCreate, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        grades, row = hierarchy.add_row(state.grades, grade_id, subject_id, data.topic)
    except NotFoundError as exc:
        raise _not_found(exc)
    write_state(conn, state.model_copy(update={"grades": grades}))
    return row_view(row, state.settings.passing_score)


@router.post("/{grade_id}/subjects/{subject_id}/rows/move")
async def move_row(grade_id: str, subject_id: str, move: MoveRequest, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        grades = hierarchy.move_row(state.grades, grade_id, subject_id, move.from_index, move.to_index)
    except NotFoundError as exc:
        raise _not_found(exc)
    except IndexError as exc:
        raise _bad_move(exc)
    write_state(conn, state.model_copy(update={"grades": grades}))
    subject = hierarchy.find_subject(hierarchy.find_grade(grades, grade_id), subject_id)
    return [r.id for r in subject.rows]


def _apply_row_change(conn, grade_id: str, subject_id: str, row_id: str, make_change) -> dict:
    """Read-modify-write one row through the reward ledger."""
    state = read_state(conn)
    try:
        subject = hierarchy.find_subject(hierarchy.find_grade(state.grades, grade_id), subject_id)
        row = hierarchy.find_row(subject, row_id)
    except NotFoundError as exc:
        raise _not_found(exc)
    change: FieldChange = make_change(row, state.settings)
    grades = hierarchy.update_row(state.grades, grade_id, subject_id, row_id, change.row_patch)
    user_data = apply_to_user_data(state.user_data, change)
    write_state(conn, state.model_copy(update={"grades": grades, "user_data": user_data}))
    updated = row.model_copy(update=change.row_patch)
    return {
        "row": row_view(updated, state.settings.passing_score),
        "expDelta": change.exp_delta,
        "coinDelta": change.coin_delta,
        "userData": user_data.to_wire(),
    }


@router.patch("/{grade_id}/subjects/{subject_id}/rows/{row_id}")
async def update_row_field(grade_id: str, subject_id: str, row_id: str, update: FieldUpdate, conn = Depends(get_db)):
    """Set one row field; rewards, score stamps and review dates follow from the change."""
    if resolve_field(update.field) is None:
        raise HTTPException(status_code=422, detail=f"Field {update.field!r} cannot be edited")
    return _apply_row_change(
        conn, grade_id, subject_id, row_id,
        lambda row, settings: apply_field_change(row, update.field, update.value, settings),
    )


@router.put("/{grade_id}/subjects/{subject_id}/rows/{row_id}/memo")
async def update_row_memo(grade_id: str, subject_id: str, row_id: str, memo: MemoUpdate, conn = Depends(get_db)):
    return _apply_row_change(
        conn, grade_id, subject_id, row_id,
        lambda row, settings: save_memo(row, memo.content, memo.link, settings),
    )


@router.delete("/{grade_id}/subjects/{subject_id}/rows/{row_id}")
async def delete_row(grade_id: str, subject_id: str, row_id: str, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        grades = hierarchy.delete_row(state.grades, grade_id, subject_id, row_id)
    except NotFoundError as exc:
        raise _not_found(exc)
    write_state(conn, state.model_copy(update={"grades": grades}))
    return {"deleted": row_id}
