from .base import StateModel


class LibraryItem(StateModel):
    id: str
    title: str = ""
    url: str = ""
    category: str = ""
