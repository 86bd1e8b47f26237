from pydantic import BaseModel
from typing import Any, Optional

class GradeCreate(BaseModel):
    name: str = "New term"
    color: Optional[str] = None

class SubjectCreate(BaseModel):
    name: str = "New subject"
    color: Optional[str] = None

class RowCreate(BaseModel):
    topic: str = ""

class RenameRequest(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None

class MoveRequest(BaseModel):
    from_index: int
    to_index: int

class FieldUpdate(BaseModel):
    field: str
    value: Any = None

class MemoUpdate(BaseModel):
    content: str = ""
    link: str = ""

class ImportRequest(BaseModel):
    payload: Any
    active_grade_id: Optional[str] = None
    active_subject_id: Optional[str] = None
    confirm: bool = False

class TargetDateUpdate(BaseModel):
    target_date: str = ""

class LibraryItemCreate(BaseModel):
    title: str = ""
    url: str = ""
    category: Optional[str] = None

class CategoryCreate(BaseModel):
    name: str = ""
