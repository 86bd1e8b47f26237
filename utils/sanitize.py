"""Normalize untrusted stored, imported or remote data into the canonical models.

Every public function here is total: bad input degrades to defaults and is
logged, it never raises.
"""
from __future__ import annotations

import json
import logging
import math
import re
import secrets
import time
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from models import AppState, Grade, IslandLevel, LibraryItem, Reward, Row, Settings, Subject, UserData
from models.grade import DEFAULT_GRADE_COLOR, DEFAULT_NAME, DEFAULT_SUBJECT_COLOR, ROUNDS
from utils.defaults import (
    DEFAULT_GRADES,
    DEFAULT_ISLAND_LEVELS,
    DEFAULT_LIBRARY,
    DEFAULT_LIBRARY_CATEGORIES,
    DEFAULT_REWARDS,
)

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"\s*([+-]?\d+)")
_MISSING = object()


def generate_id(prefix: str) -> str:
    """Millisecond timestamp plus a random token; unique enough for one learner's data."""
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def parse_int(value: Any) -> Optional[int]:
    """Leading-integer parse: "85", " 85pts" and 85.0 give 85; "", "abc", None give None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _INT_RE.match(value)
        return int(match.group(1)) if match else None
    return None


def _parse_json(value: Any) -> Any:
    """Decode JSON text; other values pass through. Raises ValueError on bad text."""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        try:
            return json.loads(value)
        except RecursionError as exc:
            raise ValueError("JSON nested too deeply") from exc
    return value


def as_mapping(value: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, Mapping):
        return value
    return None


def lookup(data: Mapping[str, Any], name: str, default: Any = None) -> Any:
    """Read a field by its camelCase key, falling back to the snake_case name."""
    alias = to_camel(name)
    if alias in data:
        return data[alias]
    if name in data:
        return data[name]
    return default


def coerce_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(int(value)) if value.is_integer() else str(value)
    return ""


def coerce_score(value: Any) -> str:
    return coerce_text(value).strip()


def _identifier(value: Any, prefix: str, taken: set) -> str:
    ident = coerce_text(value).strip()
    if not ident or ident in taken:
        ident = generate_id(prefix)
    taken.add(ident)
    return ident


def _count(value: Any) -> int:
    parsed = parse_int(value)
    return max(0, parsed) if parsed is not None else 0


def sanitize_row(value: Any, taken: Optional[set] = None) -> Optional[Row]:
    data = as_mapping(value)
    if data is None:
        return None
    fields: Dict[str, Any] = {
        "id": _identifier(data.get("id"), "r", taken if taken is not None else set()),
        "topic": coerce_text(data.get("topic")),
        "note": bool(data.get("note")),
        "memo": coerce_text(data.get("memo")),
        "link": coerce_text(data.get("link")),
        "due_date": coerce_text(lookup(data, "due_date")),
        "suggested_date2": coerce_text(lookup(data, "suggested_date2")),
        "suggested_date3": coerce_text(lookup(data, "suggested_date3")),
    }
    for n in ROUNDS:
        fields[f"practice{n}"] = bool(data.get(f"practice{n}"))
        fields[f"correct{n}"] = bool(data.get(f"correct{n}"))
        fields[f"score{n}"] = coerce_score(data.get(f"score{n}"))
        fields[f"score{n}_date"] = coerce_text(lookup(data, f"score{n}_date"))
    return Row(**fields)


def sanitize_subject(value: Any, taken: Optional[set] = None) -> Optional[Subject]:
    data = as_mapping(value)
    if data is None:
        return None
    raw_rows = data.get("rows")
    row_ids: set = set()
    rows = []
    if isinstance(raw_rows, list):
        for item in raw_rows:
            row = sanitize_row(item, row_ids)
            if row is not None:
                rows.append(row)
    return Subject(
        id=_identifier(data.get("id"), "s", taken if taken is not None else set()),
        name=coerce_text(data.get("name")) or DEFAULT_NAME,
        color=coerce_text(data.get("color")) or DEFAULT_SUBJECT_COLOR,
        rows=rows,
    )


def sanitize_subjects(value: Any) -> List[Subject]:
    if not isinstance(value, list):
        return []
    taken: set = set()
    subjects = []
    for item in value:
        subject = sanitize_subject(item, taken)
        if subject is not None:
            subjects.append(subject)
    return subjects


def sanitize_grade(value: Any, taken: Optional[set] = None) -> Optional[Grade]:
    data = as_mapping(value)
    if data is None:
        return None
    return Grade(
        id=_identifier(data.get("id"), "g", taken if taken is not None else set()),
        name=coerce_text(data.get("name")) or DEFAULT_NAME,
        color=coerce_text(data.get("color")) or DEFAULT_GRADE_COLOR,
        subjects=sanitize_subjects(data.get("subjects")),
    )


def default_grades() -> List[Grade]:
    return sanitize_grades(DEFAULT_GRADES)


def sanitize_grades(data: Any) -> List[Grade]:
    """Coerce anything into a grade list.

    Absent (None) or unparseable input means "never stored" and yields the
    bundled default dataset. Input that is present but unusable means
    "explicitly empty" and yields [].
    """
    try:
        data = _parse_json(data)
    except ValueError:
        logger.warning("Stored grades are not valid JSON, using default dataset")
        return default_grades()
    if data is None:
        return default_grades()
    if not isinstance(data, list):
        logger.warning("Grades payload is %s, not a list; treating as empty", type(data).__name__)
        return []
    taken: set = set()
    grades = []
    for item in data:
        grade = sanitize_grade(item, taken)
        if grade is not None:
            grades.append(grade)
    dropped = len(data) - len(grades)
    if dropped:
        logger.debug("Dropped %d malformed grade entries", dropped)
    return grades


def _load_blob(value: Any, name: str) -> Any:
    try:
        return _parse_json(value)
    except ValueError:
        logger.warning("Stored %s is not valid JSON, using defaults", name)
        return None


def sanitize_user_data(data: Any) -> UserData:
    data = as_mapping(_load_blob(data, "user data"))
    if data is None:
        return UserData()
    exp = _count(data.get("exp"))
    raw_coins = data.get("coins")
    # Blobs written before coins existed start with a balance equal to exp.
    coins = exp if raw_coins is None else _count(raw_coins)
    logs: Dict[str, int] = {}
    raw_logs = data.get("logs")
    if isinstance(raw_logs, Mapping):
        for day, count in raw_logs.items():
            parsed = parse_int(count)
            if isinstance(day, str) and parsed is not None and parsed > 0:
                logs[day] = parsed
    return UserData(exp=exp, coins=coins, logs=logs)


def sanitize_levels(data: Any) -> List[IslandLevel]:
    if not isinstance(data, list):
        return []
    levels = []
    for item in data:
        entry = as_mapping(item)
        if entry is None:
            continue
        level = parse_int(entry.get("level"))
        min_exp = parse_int(lookup(entry, "min_exp"))
        if level is None or min_exp is None:
            continue
        levels.append(
            IslandLevel(
                level=level,
                min_exp=min_exp,
                title=coerce_text(entry.get("title")),
                icon=coerce_text(entry.get("icon")),
            )
        )
    return levels


def sanitize_rewards(data: Any) -> List[Reward]:
    if not isinstance(data, list):
        return []
    rewards = []
    taken: set = set()
    for item in data:
        entry = as_mapping(item)
        if entry is None:
            continue
        cost = parse_int(entry.get("cost"))
        if cost is None or cost < 0:
            continue
        rewards.append(
            Reward(
                id=_identifier(entry.get("id"), "rw", taken),
                name=coerce_text(entry.get("name")) or DEFAULT_NAME,
                cost=cost,
                icon=coerce_text(entry.get("icon")),
            )
        )
    return rewards


def sanitize_settings(data: Any, defaults: Optional[Settings] = None) -> Settings:
    """Overlay stored settings onto defaults, key by key."""
    base = defaults or Settings()
    data = as_mapping(_load_blob(data, "settings")) or {}
    values: Dict[str, Any] = {}
    for name, field in Settings.model_fields.items():
        raw = lookup(data, name, _MISSING)
        if name == "island_levels":
            values[name] = sanitize_levels(raw) if isinstance(raw, list) else (
                base.island_levels or sanitize_levels(DEFAULT_ISLAND_LEVELS)
            )
            continue
        if name == "rewards":
            values[name] = sanitize_rewards(raw) if isinstance(raw, list) else (
                base.rewards or sanitize_rewards(DEFAULT_REWARDS)
            )
            continue
        if raw is _MISSING:
            continue
        if field.annotation is int:
            coerced = parse_int(raw)
        elif field.annotation is bool:
            coerced = bool(raw)
        else:
            coerced = coerce_text(raw) or None
        if coerced is not None:
            values[name] = coerced
    return base.model_copy(update=values)


def sanitize_library(data: Any) -> List[LibraryItem]:
    data = _load_blob(data, "library")
    if data is None:
        data = DEFAULT_LIBRARY
    if not isinstance(data, list):
        return []
    items = []
    taken: set = set()
    for item in data:
        entry = as_mapping(item)
        if entry is None:
            continue
        items.append(
            LibraryItem(
                id=_identifier(entry.get("id"), "lib", taken),
                title=coerce_text(entry.get("title")),
                url=coerce_text(entry.get("url")),
                category=coerce_text(entry.get("category")),
            )
        )
    return items


def sanitize_categories(data: Any) -> List[str]:
    data = _load_blob(data, "library categories")
    if data is None:
        return list(DEFAULT_LIBRARY_CATEGORIES)
    if not isinstance(data, list):
        return []
    seen = set()
    categories = []
    for item in data:
        name = coerce_text(item).strip()
        if not name or name in seen:
            continue
        seen.add(name)
        categories.append(name)
    return categories


def sanitize_target_date(data: Any) -> str:
    if isinstance(data, (str, bytes)):
        try:
            data = _parse_json(data)
        except ValueError:
            pass  # bare date text, not JSON
    text = coerce_text(data).strip()
    if not text:
        return ""
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        return ""


STATE_KEYS = ("grades", "user_data", "target_date", "library", "library_categories", "settings")


def sanitize_state(blobs: Mapping[str, Any], default_settings: Optional[Settings] = None) -> AppState:
    """Build an AppState from independently stored blobs; each key defaults on its own."""
    return AppState(
        grades=sanitize_grades(blobs.get("grades")),
        user_data=sanitize_user_data(blobs.get("user_data")),
        target_date=sanitize_target_date(blobs.get("target_date")),
        library=sanitize_library(blobs.get("library")),
        library_categories=sanitize_categories(blobs.get("library_categories")),
        settings=sanitize_settings(blobs.get("settings"), default_settings),
    )
