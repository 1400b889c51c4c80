"""Timeline facade: the operations a presentation layer calls into."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable

from activity_timeline import events as ev
from activity_timeline import store as st
from activity_timeline.config import TimelineConfig, configure_logging, load_config
from activity_timeline.date_index import DateIndex, rebuild
from activity_timeline.errors import ValidationError
from activity_timeline.events import TimelineEvents
from activity_timeline.loader import Batch, FetchHook, IncrementalLoader
from activity_timeline.metrics import Metrics, MetricsAggregator
from activity_timeline.models import Comment, CommentAuthor, Log, Person, Role, day_key
from activity_timeline.navigation import Autocomplete, Page, paginate, search
from activity_timeline.store import EntityStore
from activity_timeline.threads import ThreadManager

logger = logging.getLogger(__name__)

DayLike = date | datetime | str


class Timeline:
    """Activity-log timeline over a single entity store.

    Derived views (date index, metrics) are updated synchronously from store
    notifications, so every read observes the latest completed mutation.
    """

    def __init__(
        self,
        people: Iterable[Person] = (),
        today: Callable[[], date] | None = None,
        fetch: FetchHook | None = None,
        config: TimelineConfig | None = None,
        events: TimelineEvents | None = None,
    ):
        """Initialize the timeline.

        Args:
            people: Read-only person directory for search and role lookups.
            today: Clock returning the current day; defaults to ``date.today``.
            fetch: Optional async hook used by ``load_more_groups`` to pull in
                older records.
            config: Page, batch and trailing-window settings.
            events: Event fan-out; a private instance is created if None.
        """
        self.config = config or TimelineConfig()
        self.today = today or date.today
        self.events = events or TimelineEvents()

        self.store = EntityStore(people)
        self.index = DateIndex()
        self.aggregator = MetricsAggregator(
            self.index, self.today, self.config.trailing_window_days
        )
        self.threads = ThreadManager(self.store)
        self.loader = IncrementalLoader(self.index, fetch=fetch, ingest=self.ingest)

        self.store.subscribe(self._on_store_change)

    @classmethod
    def from_config(cls, people: Iterable[Person] = (), **kwargs: Any) -> Timeline:
        """Build a timeline from the persisted configuration."""

        config = load_config()
        configure_logging(config.log_level)
        return cls(people, config=config, **kwargs)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def submit_log(
        self,
        author_id: int,
        day: DayLike,
        content: str,
        link: str | None = None,
    ) -> Log:
        return self.store.add_log(author_id, day, content, link)

    def post_comment(self, log_id: int, author: CommentAuthor, content: str) -> Comment:
        return self.threads.post_comment(log_id, author, content)

    def mark_comment_read(self, log_id: int, comment_id: int) -> None:
        self.threads.mark_read(log_id, comment_id)

    def ingest(self, records: Iterable[dict[str, Any]]) -> list[Log]:
        """Submit externally retrieved log records.

        Each record needs ``author_id``, ``date`` and ``content`` and may
        carry a ``link``. Every record is checked before any is stored, so a
        batch with one bad record stores nothing.

        Raises:
            ValidationError: If any record is incomplete or invalid.
        """
        records = list(records)
        for record in records:
            missing = [name for name in ("author_id", "date", "content") if name not in record]
            if missing:
                raise ValidationError(f"Log record missing field(s): {', '.join(missing)}")
            self.store.validate_log(record["date"], record["content"], record.get("link"))

        return [
            self.submit_log(
                record["author_id"],
                record["date"],
                record["content"],
                record.get("link"),
            )
            for record in records
        ]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def grouped_timeline(
        self, author_id: int | None = None
    ) -> tuple[tuple[date, ...], dict[date, tuple[Log, ...]]]:
        """Return (descending day keys, logs grouped by day).

        Args:
            author_id: Restrict the view to one author's logs.
        """
        if author_id is None:
            return self.index.keys, self.index.groups

        groups, keys = rebuild(log for log in self.store if log.author_id == author_id)
        return tuple(keys), {key: tuple(groups[key]) for key in keys}

    def logs_for_day(self, day: DayLike) -> tuple[Log, ...]:
        return self.index.group(day_key(day))

    def metrics(self) -> Metrics:
        return self.aggregator.snapshot()

    def logs_in_trailing_window(self, days: int) -> int:
        return self.aggregator.logs_in_trailing_window(days)

    def unread_count(self, viewer_role: Role, log_id: int | None = None) -> int:
        """Unread comments addressed to ``viewer_role``, for one log or all."""

        if log_id is None:
            return self.threads.total_unread(viewer_role)
        return self.threads.unread_count_for(self.store.get(log_id), viewer_role)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def search_people(self, query: str) -> list[Person]:
        return search(query, self.store.people)

    def autocomplete(self) -> Autocomplete:
        return Autocomplete(people=self.store.people)

    def jump_to_date(self, day: DayLike) -> date | None:
        """Resolve ``day`` to its own or the nearest earlier day group.

        Jumping supersedes any load still in flight.
        """
        self.loader.cancel()
        return self.index.nearest_at_or_before(day_key(day))

    def get_page(self, day: DayLike, page_number: int, page_size: int | None = None) -> Page:
        size = self.config.page_size if page_size is None else page_size
        return paginate(self.logs_for_day(day), size, page_number)

    async def load_more_groups(self, batch_size: int | None = None) -> Batch:
        """Deliver the next batch of older day keys.

        Returns:
            A Batch; ``exhausted`` is set once every key has been delivered and
            ``cancelled`` when a newer request superseded this one.
        """
        size = self.config.batch_size if batch_size is None else batch_size
        batch = await self.loader.load(size)
        if batch.keys:
            self.events.publish(
                ev.GROUPS_LOADED,
                keys=[key.isoformat() for key in batch.keys],
            )
        return batch

    def get_stats(self) -> dict:
        return {
            "logs": len(self.store),
            "days": len(self.index),
            "loader": self.loader.get_stats(),
            "events": self.events.get_stats(),
        }

    # ------------------------------------------------------------------
    # Derived view maintenance
    # ------------------------------------------------------------------

    def _on_store_change(self, event: str, log: Log, comment: Comment | None) -> None:
        if event == st.LOG_ADDED:
            self.index.add(log)
            self.aggregator.log_added(log)
            self.events.publish(ev.LOG_SUBMITTED, log_id=log.id, date=log.date.isoformat())
        elif event == st.COMMENT_ADDED:
            self.aggregator.comment_added()
            self.events.publish(ev.COMMENT_POSTED, log_id=log.id, comment_id=comment.id)
        elif event == st.COMMENT_READ:
            self.events.publish(ev.COMMENT_READ, log_id=log.id, comment_id=comment.id)
