"""Comment threads and read/unread state per log."""

from __future__ import annotations

import logging
from typing import Iterable

from activity_timeline.models import Comment, CommentAuthor, Log, Role
from activity_timeline.store import EntityStore

logger = logging.getLogger(__name__)


def unread_count_for(log: Log, viewer_role: Role) -> int:
    """Count unread comments on ``log`` written by someone of another role."""

    return sum(
        1
        for comment in log.comments
        if not comment.is_read and comment.role != viewer_role
    )


def total_unread(logs: Iterable[Log], viewer_role: Role) -> int:
    """Sum ``unread_count_for`` across ``logs``."""

    return sum(unread_count_for(log, viewer_role) for log in logs)


class ThreadManager:
    """Comment lifecycle: posting and the one-way Unread -> Read transition."""

    def __init__(self, store: EntityStore):
        self.store = store

    def post_comment(self, log_id: int, author: CommentAuthor, content: str) -> Comment:
        return self.store.add_comment(log_id, author, content)

    def mark_read(self, log_id: int, comment_id: int) -> bool:
        """Mark a comment read. Repeating the call is a no-op.

        Returns:
            True if this call changed the comment's state.
        """
        changed = self.store.mark_comment_read(log_id, comment_id)
        if changed:
            logger.info(f"Comment {comment_id} on log {log_id} marked read")
        else:
            logger.debug(f"Comment {comment_id} on log {log_id} already read")
        return changed

    def unread_count_for(self, log: Log, viewer_role: Role) -> int:
        return unread_count_for(log, viewer_role)

    def total_unread(self, viewer_role: Role, logs: Iterable[Log] | None = None) -> int:
        return total_unread(self.store if logs is None else logs, viewer_role)
