from fastapi import APIRouter, Depends, HTTPException, status

from db.database import get_db
from routes.state import read_state, write_state
from utils.merge import RemoteOutcome, merge_remote_load
from utils.remote import RemoteClient, resolve_remote_url

router = APIRouter()


def get_remote_client_factory():
    """Dependency returning a callable url -> RemoteClient; overridden in tests."""
    return RemoteClient


def _remote_client(state, factory) -> RemoteClient:
    url = resolve_remote_url(state)
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No remote URL configured")
    return factory(url)


@router.post("/save")
async def cloud_save(conn = Depends(get_db), factory = Depends(get_remote_client_factory)):
    """Push the local state to the remote store. Never changes local data."""
    state = read_state(conn)
    client = _remote_client(state, factory)
    try:
        response = client.save(state)
    finally:
        client.close()
    if response.get("status") != "success":
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=response.get("message") or "Remote save failed")
    return {"status": "success"}


@router.post("/load")
async def cloud_load(confirm: bool = False, conn = Depends(get_db), factory = Depends(get_remote_client_factory)):
    """Pull the remote copy over local data; requires ``confirm=true``."""
    state = read_state(conn)
    if not confirm:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Loading from the remote store replaces local data")
    client = _remote_client(state, factory)
    try:
        response = client.load()
    finally:
        client.close()
    result = merge_remote_load(state, response)
    if result.outcome == RemoteOutcome.TRANSPORT_ERROR:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.message)
    if result.outcome == RemoteOutcome.INVALID_FORMAT:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=result.message)
    if result.outcome == RemoteOutcome.APPLIED:
        write_state(conn, result.state)
    return {
        "outcome": result.outcome.value,
        "activeGradeId": result.active_grade_id,
        "message": result.message,
    }
