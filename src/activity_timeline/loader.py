"""Lazy loading of older day groups.

Batches are cut from the date index's descending key sequence. When an
external fetch hook is configured, it is awaited first so older data can be
pulled in before the batch is cut.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Iterable, Sequence

from activity_timeline.date_index import DateIndex
from activity_timeline.errors import ValidationError

logger = logging.getLogger(__name__)

LogRecord = dict[str, Any]
FetchHook = Callable[[date | None, int], Awaitable[Iterable[LogRecord]]]
IngestHook = Callable[[Iterable[LogRecord]], Any]


@dataclass(frozen=True)
class Batch:
    """Result of a load request.

    An exhausted batch is terminal; an empty batch that is not exhausted
    (for example a cancelled one) is transient.
    """

    keys: tuple[date, ...] = ()
    exhausted: bool = False
    cancelled: bool = False


def load_more(ordered_keys: Sequence[date], already_loaded: int, batch_size: int) -> Batch:
    """Return the next ``batch_size`` keys after the first ``already_loaded``.

    Raises:
        ValidationError: If ``batch_size`` is not positive.
    """
    if batch_size <= 0:
        raise ValidationError(f"Batch size must be positive, got {batch_size}")

    if already_loaded >= len(ordered_keys):
        return Batch(exhausted=True)

    start = max(already_loaded, 0)
    return Batch(keys=tuple(ordered_keys[start:start + batch_size]))


class IncrementalLoader:
    """Serves successive batches of older day keys, one request at a time."""

    def __init__(
        self,
        index: DateIndex,
        fetch: FetchHook | None = None,
        ingest: IngestHook | None = None,
    ):
        """Initialize the loader.

        Args:
            index: Date index whose keys are handed out.
            fetch: Optional coroutine function ``fetch(before, limit)`` that
                retrieves records for up to ``limit`` days older than
                ``before`` (None on the first call).
            ingest: Callback that submits fetched records to the store.
                Required when ``fetch`` is given.
        """
        if fetch is not None and ingest is None:
            raise ValueError("An ingest callback is required with a fetch hook")

        self.index = index
        self.fetch = fetch
        self.ingest = ingest

        self._task: asyncio.Task | None = None
        self._generation = 0
        self._cursor: date | None = None
        self._delivered = 0
        self._cancelled = 0
        self._last_load: datetime | None = None

    @property
    def cursor(self) -> date | None:
        """Oldest key delivered so far."""
        return self._cursor

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def loaded_count(self) -> int:
        """Number of index keys at or above the cursor."""

        if self._cursor is None:
            return 0
        position = self.index.position(self._cursor)
        return position + 1 if self._cursor in self.index else position

    async def load(self, batch_size: int) -> Batch:
        """Load the next batch, superseding any request still in flight.

        A superseded request resolves to a cancelled batch and applies
        nothing.
        """
        if batch_size <= 0:
            raise ValidationError(f"Batch size must be positive, got {batch_size}")

        self.cancel()
        generation = self._generation
        task = asyncio.create_task(self._load(generation, batch_size))
        self._task = task

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if self._task is task:
                self._task = None

        if task.cancelled():
            return Batch(cancelled=True)
        return task.result()

    def cancel(self) -> None:
        """Cancel the in-flight request, if any."""

        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
            self._cancelled += 1
            logger.warning("Superseded in-flight load request")
        self._task = None

    def reset(self) -> None:
        """Cancel pending work and start delivering from the newest key again."""

        self.cancel()
        self._cursor = None
        self._delivered = 0

    async def _load(self, generation: int, batch_size: int) -> Batch:
        if self.fetch is not None and self._remaining() < batch_size:
            records = await self.fetch(self._cursor, batch_size)
            if generation != self._generation:
                return Batch(cancelled=True)
            self.ingest(list(records or ()))

        batch = load_more(self.index.keys, self.loaded_count(), batch_size)
        if batch.keys:
            self._cursor = batch.keys[-1]
            self._delivered += len(batch.keys)
            logger.info(
                f"Loaded {len(batch.keys)} day group(s) down to {self._cursor.isoformat()}"
            )
        else:
            logger.info("Day groups exhausted")

        self._last_load = datetime.now()
        return batch

    def _remaining(self) -> int:
        return len(self.index) - self.loaded_count()

    def get_stats(self) -> dict:
        """Get loader statistics."""
        return {
            "cursor": self._cursor.isoformat() if self._cursor else None,
            "delivered": self._delivered,
            "cancelled": self._cancelled,
            "in_flight": self.in_flight,
            "last_load": self._last_load.isoformat() if self._last_load else None,
        }
