"""Tests for search, date jumps and pagination."""

from datetime import date

import pytest

from activity_timeline.errors import ValidationError
from activity_timeline.navigation import Autocomplete, page_count, paginate, resolve, search

from conftest import PEOPLE

NAMES = PEOPLE[:3]


def test_search_empty_query_suppresses_results():
    assert search("", PEOPLE) == []
    assert search(None, PEOPLE) == []


def test_search_case_insensitive_substring():
    results = search("jo", NAMES)
    assert [person.name for person in results] == ["John Doe", "Bob Johnson"]
    assert [person.name for person in search("SMITH", NAMES)] == ["Jane Smith"]


def test_autocomplete_selection_clears_suggestions():
    box = Autocomplete(people=NAMES)
    suggestions = box.update("jo")
    assert len(suggestions) == 2

    chosen = box.select(suggestions[1])
    assert chosen.name == "Bob Johnson"
    assert box.query == "Bob Johnson"
    assert box.suggestions == []
    assert box.selected is chosen

    box.clear()
    assert box.selected is None and box.query == ""


KEYS = (date(2024, 3, 3), date(2024, 3, 1))


def test_resolve_exact_and_nearest_earlier():
    assert resolve(date(2024, 3, 3), KEYS) == date(2024, 3, 3)
    assert resolve(date(2024, 3, 2), KEYS) == date(2024, 3, 1)
    assert resolve("2024-04-01", KEYS) == date(2024, 3, 3)


def test_resolve_before_all_data():
    assert resolve(date(2024, 2, 1), KEYS) is None
    assert resolve(date(2024, 2, 1), ()) is None


def test_paginate_clamps_to_last_page():
    logs = list(range(12))
    last = paginate(logs, page_size=5, page_number=3)

    assert paginate(logs, page_size=5, page_number=10) == last
    assert last.items == (10, 11)
    assert last.total_pages == 3
    assert last.has_previous and not last.has_next


def test_paginate_clamps_low_page_numbers():
    logs = list(range(7))
    assert paginate(logs, 5, 0).items == (0, 1, 2, 3, 4)
    assert paginate(logs, 5, -3).number == 1


def test_paginate_empty_day():
    page = paginate([], 5, 4)
    assert page.items == ()
    assert page.number == 1
    assert page.total_pages == 1


@pytest.mark.parametrize("size", [0, -1])
def test_paginate_rejects_non_positive_page_size(size):
    with pytest.raises(ValidationError):
        paginate([1, 2], size, 1)
    with pytest.raises(ValidationError):
        page_count(2, size)
