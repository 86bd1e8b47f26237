from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from config import get_config_value
from db.database import get_db, load_state, save_state
from models import AppState, Settings
from models.requests import TargetDateUpdate
from utils.sanitize import sanitize_settings, sanitize_target_date

router = APIRouter()


def default_settings() -> Settings:
    return sanitize_settings(None, Settings(passing_score=get_config_value("defaults", "passing_score", 80)))


def read_state(conn) -> AppState:
    return load_state(conn, default_settings())


def write_state(conn, state: AppState) -> None:
    save_state(conn, state)


@router.get("/state")
async def get_state(conn = Depends(get_db)):
    """Everything the client needs to render, in the persisted camelCase shape."""
    return read_state(conn).to_wire()


@router.patch("/settings")
async def update_settings(changes: Dict[str, Any] = Body(...), conn = Depends(get_db)):
    """Overlay edited settings (amounts, level table, reward catalog) onto the stored ones."""
    state = read_state(conn)
    settings = sanitize_settings(changes, defaults=state.settings)
    write_state(conn, state.model_copy(update={"settings": settings}))
    return settings.to_wire()


@router.put("/target-date")
async def set_target_date(update: TargetDateUpdate, conn = Depends(get_db)):
    state = read_state(conn)
    target_date = sanitize_target_date(update.target_date)
    write_state(conn, state.model_copy(update={"target_date": target_date}))
    return {"targetDate": target_date}
