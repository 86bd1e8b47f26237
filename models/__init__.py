from .grade import Grade, Subject, Row
from .user import UserData
from .settings import Settings, IslandLevel, Reward
from .library import LibraryItem
from .state import AppState

__all__ = ['Grade', 'Subject', 'Row', 'UserData', 'Settings', 'IslandLevel', 'Reward', 'LibraryItem', 'AppState']
