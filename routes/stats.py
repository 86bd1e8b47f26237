from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from db.database import get_db
from routes.state import read_state
from utils.hierarchy import NotFoundError, find_grade
from utils.stats import days_until, progress_stats, subject_pass_rates, weak_rows

router = APIRouter()

@router.get("")
async def learner_stats(grade_id: Optional[str] = None, conn = Depends(get_db)):
    """Stats dashboard: unit totals, weak units, days to target, activity heatmap."""
    state = read_state(conn)
    passing = state.settings.passing_score
    pass_rates = []
    if grade_id is not None:
        try:
            pass_rates = subject_pass_rates(find_grade(state.grades, grade_id), passing)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc))
    weak = [
        {
            "gradeId": located.grade_id,
            "gradeName": located.grade_name,
            "subjectId": located.subject_id,
            "subjectName": located.subject_name,
            "row": located.row.to_wire(),
        }
        for located in weak_rows(state.grades, passing, grade_id)
    ]
    return {
        **progress_stats(state.grades, passing),
        "weakRows": weak,
        "subjectPassRates": pass_rates,
        "targetDate": state.target_date,
        "daysLeft": days_until(state.target_date, date.today()),
        "logs": state.user_data.logs,
    }
