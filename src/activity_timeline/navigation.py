"""Search, date-jump resolution and in-day pagination."""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Sequence, TypeVar

from activity_timeline.errors import ValidationError
from activity_timeline.models import Person, day_key

T = TypeVar("T")


# ----------------------------------------------------------------------
# Autocomplete
# ----------------------------------------------------------------------


def search(query: str | None, people: Iterable[Person]) -> list[Person]:
    """Return people whose name contains ``query``, ignoring case.

    An empty query suppresses suggestions entirely rather than matching all.
    """
    if not query:
        return []

    needle = query.casefold()
    return [person for person in people if needle in person.name.casefold()]


@dataclass
class Autocomplete:
    """Suggestion list state for a person search box."""

    people: Sequence[Person]
    query: str = ""
    suggestions: list[Person] = field(default_factory=list)
    selected: Person | None = None

    def update(self, query: str) -> list[Person]:
        self.query = query
        self.selected = None
        self.suggestions = search(query, self.people)
        return self.suggestions

    def select(self, person: Person) -> Person:
        """Pick a suggestion; selecting dismisses the list."""

        self.selected = person
        self.query = person.name
        self.suggestions = []
        return person

    def clear(self) -> None:
        self.query = ""
        self.suggestions = []
        self.selected = None


# ----------------------------------------------------------------------
# Date jumps
# ----------------------------------------------------------------------


def resolve(target: date | datetime | str, ordered_keys: Sequence[date]) -> date | None:
    """Resolve a target day against descending day keys.

    Args:
        target: Day to jump to.
        ordered_keys: Existing day keys, most recent first.

    Returns:
        The target's own key when present, otherwise the most recent key
        before it, or None when the target predates every key.
    """
    day = day_key(target)
    position = bisect.bisect_left(
        ordered_keys, -day.toordinal(), key=lambda key: -key.toordinal()
    )
    if position < len(ordered_keys):
        return ordered_keys[position]
    return None


# ----------------------------------------------------------------------
# Pagination
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Page:
    """One page of a day's logs."""

    items: tuple
    number: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages


def page_count(total: int, page_size: int) -> int:
    """Return the number of pages, never less than one."""

    if page_size <= 0:
        raise ValidationError(f"Page size must be positive, got {page_size}")
    return max(1, math.ceil(total / page_size))


def paginate(items: Sequence[T], page_size: int, page_number: int) -> Page:
    """Return the 1-indexed page ``page_number`` of ``items``.

    Out-of-range page numbers are clamped to the first or last page.

    Raises:
        ValidationError: If ``page_size`` is not positive.
    """
    total_pages = page_count(len(items), page_size)
    number = min(max(page_number, 1), total_pages)
    start = (number - 1) * page_size
    return Page(
        items=tuple(items[start:start + page_size]),
        number=number,
        total_pages=total_pages,
    )
