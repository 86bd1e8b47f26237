from typing import Dict

from .base import StateModel


class UserData(StateModel):
    exp: int = 0
    coins: int = 0
    logs: Dict[str, int] = {}
