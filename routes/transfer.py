import io
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from db.database import get_db
from models.requests import ImportRequest
from routes.state import read_state, write_state
from utils.merge import MergeOutcome, apply_import, export_grades

router = APIRouter()


@router.post("/import")
async def import_payload(request: ImportRequest, conn = Depends(get_db)):
    """Import a full backup, a subject list or marker text into the current data.

    Full backups and subject lists are only applied when ``confirm`` is set;
    the first call returns 409 with a description to confirm against.
    """
    state = read_state(conn)
    result = apply_import(
        state.grades,
        request.payload,
        active_grade_id=request.active_grade_id,
        active_subject_id=request.active_subject_id,
        confirmed=request.confirm,
    )
    if result.outcome == MergeOutcome.NOT_RECOGNIZED:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=result.message)
    if result.outcome == MergeOutcome.CONFIRMATION_REQUIRED:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.message)
    if result.outcome == MergeOutcome.NO_ACTIVE_GRADE:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)
    if result.outcome == MergeOutcome.APPLIED:
        write_state(conn, state.model_copy(update={"grades": result.grades}))
    return {
        "outcome": result.outcome.value,
        "importedCount": result.imported_count,
        "activeGradeId": result.active_grade_id,
        "activeSubjectId": result.active_subject_id,
        "message": result.message,
    }


@router.get("/export")
async def export_backup(conn = Depends(get_db)):
    data = export_grades(read_state(conn).grades).encode("utf-8")
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    headers = {"Content-Disposition": f"attachment; filename=study_data_{stamp}.json"}
    return StreamingResponse(io.BytesIO(data), media_type="application/json", headers=headers)
