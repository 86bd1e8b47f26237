"""Pure edits on the link library and its category list."""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

from models import LibraryItem
from utils.hierarchy import NotFoundError
from utils.sanitize import coerce_text, generate_id

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


class DuplicateCategoryError(ValueError):
    pass


def normalize_url(url: str) -> str:
    url = coerce_text(url).strip()
    if url and not _SCHEME.match(url):
        url = "https://" + url
    return url


def add_item(
    library: List[LibraryItem],
    title: str,
    url: str,
    category: Optional[str] = None,
    categories: Optional[List[str]] = None,
) -> Tuple[List[LibraryItem], LibraryItem]:
    """Append a link; without a category it lands in the first one."""
    title = coerce_text(title).strip()
    url = normalize_url(url)
    if not title or not url:
        raise ValueError("A link needs both a title and a URL")
    if not category:
        category = categories[0] if categories else ""
    item = LibraryItem(id=generate_id("lib"), title=title, url=url, category=category)
    return library + [item], item


def delete_item(library: List[LibraryItem], item_id: str) -> List[LibraryItem]:
    if not any(item.id == item_id for item in library):
        raise NotFoundError(f"Library item {item_id} not found")
    return [item for item in library if item.id != item_id]


def add_category(categories: List[str], name: str) -> List[str]:
    name = coerce_text(name).strip()
    if not name:
        raise ValueError("Category name is empty")
    if name in categories:
        raise DuplicateCategoryError(f"Category {name!r} already exists")
    return categories + [name]


def rename_category(
    categories: List[str],
    library: List[LibraryItem],
    old_name: str,
    new_name: str,
) -> Tuple[List[str], List[LibraryItem]]:
    """Rename a category and move its links along with it."""
    if old_name not in categories:
        raise NotFoundError(f"Category {old_name!r} not found")
    new_name = coerce_text(new_name).strip()
    if not new_name or new_name == old_name:
        return categories, library
    if new_name in categories:
        raise DuplicateCategoryError(f"Category {new_name!r} already exists")
    renamed = [new_name if c == old_name else c for c in categories]
    moved = [
        item.model_copy(update={"category": new_name}) if item.category == old_name else item
        for item in library
    ]
    return renamed, moved


def delete_category(
    categories: List[str],
    library: List[LibraryItem],
    name: str,
) -> Tuple[List[str], List[LibraryItem]]:
    """Drop a category together with every link filed under it."""
    if name not in categories:
        raise NotFoundError(f"Category {name!r} not found")
    return (
        [c for c in categories if c != name],
        [item for item in library if item.category != name],
    )
