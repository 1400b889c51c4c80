"""Canonical store of logs and their comment threads."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Iterable, Iterator

from activity_timeline.errors import NotFoundError, ValidationError
from activity_timeline.models import (
    Comment,
    CommentAuthor,
    Log,
    Person,
    Role,
    day_key,
    normalize_link,
    role_of,
)

logger = logging.getLogger(__name__)

# Listener signature: (event, log, comment-or-None)
StoreListener = Callable[[str, Log, "Comment | None"], None]

LOG_ADDED = "log_added"
COMMENT_ADDED = "comment_added"
COMMENT_READ = "comment_read"


class EntityStore:
    """Single source of truth for Log and Comment records.

    Every mutation validates completely before touching state, then notifies
    subscribed listeners synchronously so derived views are current before the
    mutating call returns.
    """

    def __init__(self, people: Iterable[Person] = ()):
        """Initialize an empty store.

        Args:
            people: Read-only person directory, used to resolve the role of a
                log's author when deciding whether a comment is self-authored.
        """
        self._people: dict[int, Person] = {person.id: person for person in people}
        self._logs: dict[int, Log] = {}
        self._next_id = 1
        self._listeners: list[StoreListener] = []

    def __len__(self) -> int:
        return len(self._logs)

    def __iter__(self) -> Iterator[Log]:
        return iter(self._logs.values())

    @property
    def people(self) -> tuple[Person, ...]:
        return tuple(self._people.values())

    def subscribe(self, listener: StoreListener) -> None:
        """Register a callback invoked after every successful mutation."""

        self._listeners.append(listener)

    def get(self, log_id: int) -> Log:
        """Return the log with ``log_id``.

        Raises:
            NotFoundError: If no such log exists.
        """
        try:
            return self._logs[log_id]
        except KeyError:
            raise NotFoundError(f"Log not found: {log_id}") from None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_log(
        self,
        author_id: int,
        day: date | datetime | str,
        content: str,
        link: str | None = None,
    ) -> Log:
        """Validate and append a new log, assigning it a fresh id.

        Raises:
            ValidationError: On empty content, an invalid day or a malformed link.
        """
        key, cleaned_content, cleaned_link = self.validate_log(day, content, link)

        log = Log(
            id=self._next_id,
            date=key,
            author_id=author_id,
            content=cleaned_content,
            link=cleaned_link,
        )
        self._logs[log.id] = log
        self._next_id += 1

        logger.info(f"Log {log.id} added for {key.isoformat()} by author {author_id}")
        self._notify(LOG_ADDED, log, None)
        return log

    def add_comment(self, log_id: int, author: CommentAuthor, content: str) -> Comment:
        """Append a comment to a log's thread.

        Self-authored comments start out read; all others start unread.

        Raises:
            NotFoundError: If ``log_id`` does not exist.
            ValidationError: If ``content`` is empty after trimming or the
                author is neither a Person nor a known Role.
        """
        role_of(author)
        log = self.get(log_id)
        if content is None or not str(content).strip():
            raise ValidationError("Comment content must not be empty")

        next_comment_id = log.comments[-1].id + 1 if log.comments else 1
        comment = Comment(
            id=next_comment_id,
            author=author,
            content=str(content).strip(),
            is_read=self.is_self_authored(log, author),
        )
        log.comments.append(comment)

        logger.info(
            f"Comment {comment.id} added to log {log.id} by {role_of(author).value}"
            f" (read={comment.is_read})"
        )
        self._notify(COMMENT_ADDED, log, comment)
        return comment

    def mark_comment_read(self, log_id: int, comment_id: int) -> bool:
        """Transition a comment to read.

        Returns:
            True if the comment changed state, False if it was already read.

        Raises:
            NotFoundError: If the log or the comment does not exist.
        """
        log = self.get(log_id)
        comment = log.comment(comment_id)
        if comment is None:
            raise NotFoundError(f"Comment {comment_id} not found on log {log_id}")

        if comment.is_read:
            return False

        comment.is_read = True
        self._notify(COMMENT_READ, log, comment)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def validate_log(
        self,
        day: date | datetime | str,
        content: str,
        link: str | None = None,
    ) -> tuple[date, str, str | None]:
        """Check a log submission without storing it.

        Returns:
            Tuple of (day key, trimmed content, cleaned link).

        Raises:
            ValidationError: On empty content, an invalid day or a malformed link.
        """
        if content is None or not str(content).strip():
            raise ValidationError("Log content must not be empty")

        return day_key(day), str(content).strip(), normalize_link(link)

    def author_role(self, log: Log) -> Role | None:
        person = self._people.get(log.author_id)
        return person.role if person else None

    def is_self_authored(self, log: Log, author: CommentAuthor) -> bool:
        """Return True when ``author`` wrote ``log`` (by person, or by role)."""

        if isinstance(author, Person):
            return author.id == log.author_id
        return self.author_role(log) == role_of(author)

    def _notify(self, event: str, log: Log, comment: Comment | None) -> None:
        for listener in self._listeners:
            listener(event, log, comment)
