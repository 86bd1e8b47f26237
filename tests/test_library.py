import pytest

from models import LibraryItem
from utils.hierarchy import NotFoundError
from utils.library import (
    DuplicateCategoryError,
    add_category,
    add_item,
    delete_category,
    delete_item,
    normalize_url,
    rename_category,
)

CATEGORIES = ["General", "Math"]


def _library():
    return [
        LibraryItem(id="lib_1", title="Khan Academy", url="https://www.khanacademy.org", category="General"),
        LibraryItem(id="lib_2", title="Desmos", url="https://www.desmos.com", category="Math"),
    ]


def test_add_item_appends_and_adds_scheme():
    library, item = add_item(_library(), " Wolfram ", "wolframalpha.com", "Math", CATEGORIES)
    assert library[:2] == _library()
    assert library[-1] == item
    assert item.title == "Wolfram"
    assert item.url == "https://wolframalpha.com"
    assert item.category == "Math"
    assert item.id not in {"lib_1", "lib_2"}


def test_add_item_defaults_to_first_category():
    _, item = add_item([], "Notes", "http://notes.example", categories=CATEGORIES)
    assert item.category == "General"
    assert item.url == "http://notes.example"


def test_add_item_requires_title_and_url():
    with pytest.raises(ValueError):
        add_item(_library(), "", "example.com")
    with pytest.raises(ValueError):
        add_item(_library(), "Title", "   ")


def test_normalize_url_keeps_existing_scheme():
    assert normalize_url("HTTPS://Example.com") == "HTTPS://Example.com"
    assert normalize_url("") == ""


def test_delete_item():
    assert [i.id for i in delete_item(_library(), "lib_1")] == ["lib_2"]
    with pytest.raises(NotFoundError):
        delete_item(_library(), "missing")


def test_add_category_rejects_duplicates_and_blanks():
    assert add_category(CATEGORIES, " Science ") == ["General", "Math", "Science"]
    with pytest.raises(DuplicateCategoryError):
        add_category(CATEGORIES, "Math")
    with pytest.raises(ValueError):
        add_category(CATEGORIES, "  ")


def test_rename_category_moves_its_links():
    categories, library = rename_category(CATEGORIES, _library(), "Math", "Mathematics")
    assert categories == ["General", "Mathematics"]
    assert [i.category for i in library] == ["General", "Mathematics"]
    assert library[0] == _library()[0]


def test_rename_category_noop_and_conflicts():
    assert rename_category(CATEGORIES, _library(), "Math", "Math") == (CATEGORIES, _library())
    assert rename_category(CATEGORIES, _library(), "Math", " ") == (CATEGORIES, _library())
    with pytest.raises(DuplicateCategoryError):
        rename_category(CATEGORIES, _library(), "Math", "General")
    with pytest.raises(NotFoundError):
        rename_category(CATEGORIES, _library(), "Art", "Music")


def test_delete_category_drops_its_links():
    categories, library = delete_category(CATEGORIES, _library(), "Math")
    assert categories == ["General"]
    assert [i.id for i in library] == ["lib_1"]
    with pytest.raises(NotFoundError):
        delete_category(CATEGORIES, _library(), "Art")
