from typing import List, Optional

from .base import StateModel


class IslandLevel(StateModel):
    level: int
    min_exp: int
    title: str = ""
    icon: str = ""


class Reward(StateModel):
    id: str
    name: str
    cost: int
    icon: str = ""


# Credential-like keys are never overwritten by a remote copy.
CREDENTIAL_FIELDS = ("gas_url", "gemini_api_key")


class Settings(StateModel):
    passing_score: int = 80
    exp_memo: int = 10
    exp_practice: int = 20
    exp_correct: int = 20
    exp_score_entry: int = 10
    exp_pass: int = 50
    exp_pomodoro: int = 30
    coin_memo: int = 1
    coin_practice: int = 2
    coin_correct: int = 2
    coin_score_entry: int = 1
    coin_pass: int = 5
    coin_pomodoro: int = 3
    island_levels: List[IslandLevel] = []
    rewards: List[Reward] = []
    app_title: Optional[str] = None
    app_subtitle: Optional[str] = None
    gas_url: Optional[str] = None
    gemini_api_key: Optional[str] = None
    auto_cloud_save: bool = False
