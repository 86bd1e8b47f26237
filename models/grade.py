from typing import List

from .base import StateModel

ROUNDS = (1, 2, 3)
DEFAULT_GRADE_COLOR = "#5E5244"
DEFAULT_SUBJECT_COLOR = "#8CD19D"
DEFAULT_NAME = "Untitled"


class Row(StateModel):
    id: str
    topic: str = ""
    note: bool = False
    memo: str = ""
    link: str = ""
    due_date: str = ""
    practice1: bool = False
    correct1: bool = False
    score1: str = ""
    score1_date: str = ""
    practice2: bool = False
    correct2: bool = False
    score2: str = ""
    score2_date: str = ""
    practice3: bool = False
    correct3: bool = False
    score3: str = ""
    score3_date: str = ""
    suggested_date2: str = ""
    suggested_date3: str = ""

    def score(self, round_number: int) -> str:
        return getattr(self, f"score{round_number}")


class Subject(StateModel):
    id: str
    name: str = DEFAULT_NAME
    color: str = DEFAULT_SUBJECT_COLOR
    rows: List[Row] = []


class Grade(StateModel):
    id: str
    name: str = DEFAULT_NAME
    color: str = DEFAULT_GRADE_COLOR
    subjects: List[Subject] = []
