from typing import List

from .base import StateModel
from .grade import Grade
from .library import LibraryItem
from .settings import Settings
from .user import UserData


class AppState(StateModel):
    """Everything the engine reads and writes, threaded explicitly by the caller."""

    grades: List[Grade] = []
    user_data: UserData = UserData()
    target_date: str = ""
    library: List[LibraryItem] = []
    library_categories: List[str] = []
    settings: Settings = Settings()
