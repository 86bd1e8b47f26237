"""EXP/coin accounting for row edits, redemption and island levels."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, Optional, Tuple

from pydantic.alias_generators import to_camel

from models import IslandLevel, Reward, Row, Settings, UserData
from models.grade import ROUNDS
from utils.defaults import FALLBACK_LEVEL
from utils.sanitize import coerce_score, coerce_text, sanitize_levels
from utils.schedule import suggested_date_patch
from utils.status import is_passing

SCORE_FIELDS = frozenset(f"score{n}" for n in ROUNDS)
PRACTICE_FIELDS = frozenset(f"practice{n}" for n in ROUNDS)
CORRECT_FIELDS = frozenset(f"correct{n}" for n in ROUNDS)
READ_ONLY_FIELDS = frozenset({"id", "suggested_date2", "suggested_date3"}) | frozenset(
    f"score{n}_date" for n in ROUNDS
)

_FIELD_NAMES = {to_camel(name): name for name in Row.model_fields}
_FIELD_NAMES.update({name: name for name in Row.model_fields})


@dataclass(frozen=True)
class FieldChange:
    exp_delta: int = 0
    coin_delta: int = 0
    row_patch: Dict[str, Any] = field(default_factory=dict)
    log_date: Optional[str] = None


@dataclass(frozen=True)
class Redemption:
    accepted: bool
    coin_delta: int
    user_data: UserData
    reason: str = ""


def resolve_field(name: str) -> Optional[str]:
    """Row attribute for a camelCase or snake_case field name, None if not editable."""
    resolved = _FIELD_NAMES.get(name)
    if resolved is None or resolved in READ_ONLY_FIELDS:
        return None
    return resolved


def _amounts(settings: Settings, activity: str) -> Tuple[int, int]:
    exp = getattr(settings, f"exp_{activity}")
    coins = getattr(settings, f"coin_{activity}")
    return max(0, exp), max(0, coins)


def _coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _coerce_value(name: str, value: Any) -> Any:
    annotation = Row.model_fields[name].annotation
    if annotation is bool:
        return _coerce_flag(value)
    if name in SCORE_FIELDS:
        return coerce_score(value)
    return coerce_text(value)


def apply_field_change(
    row: Row,
    field_name: str,
    new_value: Any,
    settings: Settings,
    today: Optional[date] = None,
) -> FieldChange:
    """Reward and row patch for setting one field of a row.

    Rewards only fire on transitions (flag false -> true, score unset -> set)
    so resubmitting a value earns nothing. The pass bonus is paid once per
    recorded score: only while the round has no score stamp yet, so editing
    a recorded score down and back up pays nothing. The activity log entry is
    emitted on every call, rewarded or not.
    """
    today = today or date.today()
    name = resolve_field(field_name)
    if name is None:
        return FieldChange()
    value = _coerce_value(name, new_value)
    old = getattr(row, name)
    patch: Dict[str, Any] = {name: value}
    exp = coins = 0

    def credit(activity: str) -> None:
        nonlocal exp, coins
        gained_exp, gained_coins = _amounts(settings, activity)
        exp += gained_exp
        coins += gained_coins

    if name == "note" and value and not old:
        credit("memo")
    elif name in PRACTICE_FIELDS and value and not old:
        credit("practice")
    elif name in CORRECT_FIELDS and value and not old:
        credit("correct")
    elif name in SCORE_FIELDS:
        if value and not old:
            credit("score_entry")
        stamp = f"{name}_date"
        first_record = not old or not getattr(row, stamp)
        if first_record and is_passing(value, settings.passing_score) and not is_passing(old, settings.passing_score):
            credit("pass")
        if not value:
            patch[stamp] = ""
        elif first_record:
            patch[stamp] = today.isoformat()
        patch.update(suggested_date_patch(row, name, value, settings.passing_score, today))

    return FieldChange(exp_delta=exp, coin_delta=coins, row_patch=patch, log_date=today.isoformat())


def save_memo(
    row: Row,
    content: str,
    link: str,
    settings: Settings,
    today: Optional[date] = None,
) -> FieldChange:
    """Memo editor save: the note flag follows whether anything was written."""
    content = coerce_text(content)
    link = coerce_text(link)
    change = apply_field_change(row, "note", bool(content or link), settings, today)
    return replace(change, row_patch={**change.row_patch, "memo": content, "link": link})


def pomodoro_reward(settings: Settings, today: Optional[date] = None) -> FieldChange:
    """Award for a completed focus session."""
    today = today or date.today()
    exp, coins = _amounts(settings, "pomodoro")
    return FieldChange(exp_delta=exp, coin_delta=coins, log_date=today.isoformat())


def apply_row_patch(row: Row, patch: Dict[str, Any]) -> Row:
    return row.model_copy(update=patch)


def apply_to_user_data(user_data: UserData, change: FieldChange) -> UserData:
    logs = dict(user_data.logs)
    if change.log_date:
        logs[change.log_date] = logs.get(change.log_date, 0) + 1
    return user_data.model_copy(
        update={
            "exp": user_data.exp + max(0, change.exp_delta),
            "coins": user_data.coins + max(0, change.coin_delta),
            "logs": logs,
        }
    )


def redeem(user_data: UserData, reward: Reward) -> Redemption:
    if user_data.coins < reward.cost:
        return Redemption(
            accepted=False,
            coin_delta=0,
            user_data=user_data,
            reason=f"Need {reward.cost} coins, have {user_data.coins}",
        )
    updated = user_data.model_copy(update={"coins": user_data.coins - reward.cost})
    return Redemption(accepted=True, coin_delta=-reward.cost, user_data=updated)


def _ordered_levels(levels: Any) -> list:
    return sorted(sanitize_levels(levels), key=lambda lvl: (lvl.min_exp, lvl.level))


def level_info(exp: int, levels: Any) -> IslandLevel:
    """Highest level whose threshold the EXP has reached."""
    ordered = _ordered_levels(levels)
    if not ordered:
        return IslandLevel(**FALLBACK_LEVEL)
    reached = [lvl for lvl in ordered if lvl.min_exp <= exp]
    if not reached:
        return ordered[0]
    return max(reached, key=lambda lvl: lvl.level)


def next_level_info(current: IslandLevel, levels: Any) -> Optional[IslandLevel]:
    for lvl in _ordered_levels(levels):
        if lvl.level == current.level + 1:
            return lvl
    return None


def level_progress(exp: int, levels: Any) -> float:
    """Percent of the way from the current level's threshold to the next one."""
    current = level_info(exp, levels)
    upcoming = next_level_info(current, levels)
    if upcoming is None or upcoming.min_exp <= current.min_exp:
        return 100.0
    percent = (exp - current.min_exp) / (upcoming.min_exp - current.min_exp) * 100
    return min(100.0, max(0.0, percent))
