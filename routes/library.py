from fastapi import APIRouter, Depends, HTTPException, status

from db.database import get_db
from models.requests import CategoryCreate, LibraryItemCreate, RenameRequest
from routes.state import read_state, write_state
from utils import library as links
from utils.hierarchy import NotFoundError
from utils.library import DuplicateCategoryError

router = APIRouter()


def _library_view(state) -> dict:
    return {
        "categories": state.library_categories,
        "items": [item.to_wire() for item in state.library],
    }


@router.get("")
async def get_library(conn = Depends(get_db)):
    return _library_view(read_state(conn))


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def create_item(data: LibraryItemCreate, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        library, item = links.add_item(state.library, data.title, data.url, data.category, state.library_categories)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    write_state(conn, state.model_copy(update={"library": library}))
    return item.to_wire()


@router.delete("/items/{item_id}")
async def delete_item(item_id: str, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        library = links.delete_item(state.library, item_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    write_state(conn, state.model_copy(update={"library": library}))
    return {"deleted": item_id}


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(data: CategoryCreate, conn = Depends(get_db)):
    state = read_state(conn)
    try:
        categories = links.add_category(state.library_categories, data.name)
    except DuplicateCategoryError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    updated = state.model_copy(update={"library_categories": categories})
    write_state(conn, updated)
    return _library_view(updated)


@router.patch("/categories/{name}")
async def rename_category(name: str, data: RenameRequest, conn = Depends(get_db)):
    """Rename a category; links filed under it follow the new name."""
    state = read_state(conn)
    try:
        categories, library = links.rename_category(state.library_categories, state.library, name, data.name or "")
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except DuplicateCategoryError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    updated = state.model_copy(update={"library_categories": categories, "library": library})
    write_state(conn, updated)
    return _library_view(updated)


@router.delete("/categories/{name}")
async def delete_category(name: str, conn = Depends(get_db)):
    """Remove a category and the links in it."""
    state = read_state(conn)
    try:
        categories, library = links.delete_category(state.library_categories, state.library, name)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    updated = state.model_copy(update={"library_categories": categories, "library": library})
    write_state(conn, updated)
    return _library_view(updated)
