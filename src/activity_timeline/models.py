"""Entity types shared across the timeline engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Union
from urllib.parse import urlparse

from activity_timeline.errors import ValidationError


class Role(str, Enum):
    """Participant roles recognised by the engine."""

    ADMIN = "Admin"
    TEACHER = "Teacher"
    EMPLOYEE = "Employee"


@dataclass(frozen=True)
class Person:
    """Read-only directory entry."""

    id: int
    name: str
    role: Role


CommentAuthor = Union[Person, Role]


def role_of(author: CommentAuthor) -> Role:
    """Return the role behind a comment author."""

    if isinstance(author, Person):
        return author.role
    try:
        return Role(author)
    except ValueError:
        raise ValidationError(f"Unknown comment author: {author!r}") from None


@dataclass
class Comment:
    """A reply in a log's thread. Only ``is_read`` ever changes."""

    id: int
    author: CommentAuthor
    content: str
    is_read: bool = False

    @property
    def role(self) -> Role:
        return role_of(self.author)


@dataclass
class Log:
    """A single dated activity record."""

    id: int
    date: date
    author_id: int
    content: str
    link: str | None = None
    comments: list[Comment] = field(default_factory=list)

    def __setattr__(self, name: str, value) -> None:
        # Logs stay anchored to the day they describe.
        if name == "date" and "date" in self.__dict__:
            raise AttributeError("Log.date is immutable after creation")
        super().__setattr__(name, value)

    def comment(self, comment_id: int) -> Comment | None:
        """Return the comment with ``comment_id`` or None."""

        for candidate in self.comments:
            if candidate.id == comment_id:
                return candidate
        return None


def day_key(value: date | datetime | str) -> date:
    """Normalise a date-like value to its calendar day.

    Args:
        value: A ``date``, a ``datetime`` (time-of-day is discarded) or an
            ISO string (a bare day or a full timestamp).

    Returns:
        The calendar day as a ``date``.

    Raises:
        ValidationError: If the value is not a valid calendar day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError as exc:
            raise ValidationError(f"Invalid calendar day: {value!r}") from exc
    raise ValidationError(f"Invalid calendar day: {value!r}")


def normalize_link(link: str | None) -> str | None:
    """Return a cleaned absolute http(s) link, or None when blank."""

    if link is None or not str(link).strip():
        return None

    cleaned = str(link).strip()
    parsed = urlparse(cleaned)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValidationError(f"Link must be an absolute http(s) URI: {cleaned!r}")
    return cleaned
