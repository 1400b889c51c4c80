"""Day-keyed grouping of logs with a descending key sequence."""

from __future__ import annotations

import bisect
import logging
from datetime import date
from typing import Iterable

from activity_timeline.models import Log
from activity_timeline.navigation import resolve

logger = logging.getLogger(__name__)

DateGroups = dict[date, list[Log]]


def _descending(day: date) -> int:
    return -day.toordinal()


def rebuild(logs: Iterable[Log]) -> tuple[DateGroups, list[date]]:
    """Partition logs by calendar day.

    Args:
        logs: Logs in insertion order.

    Returns:
        Tuple of (groups keyed by day, keys sorted most recent first). Logs
        sharing a day keep their insertion order.
    """
    groups: DateGroups = {}
    for log in logs:
        groups.setdefault(log.date, []).append(log)

    ordered_keys = sorted(groups, reverse=True)
    return groups, ordered_keys


class DateIndex:
    """Incrementally maintained view of logs grouped by day.

    A key is present iff its group is non-empty, and ``keys`` is always
    strictly descending.
    """

    def __init__(self, logs: Iterable[Log] = ()):
        self._groups: DateGroups = {}
        self._keys: list[date] = []
        self.reset(logs)

    def reset(self, logs: Iterable[Log]) -> None:
        """Replace the whole index with a full rebuild."""

        self._groups, self._keys = rebuild(logs)
        logger.debug(f"Date index rebuilt with {len(self._keys)} day(s)")

    @property
    def keys(self) -> tuple[date, ...]:
        return tuple(self._keys)

    @property
    def groups(self) -> dict[date, tuple[Log, ...]]:
        return {key: tuple(self._groups[key]) for key in self._keys}

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, day: object) -> bool:
        return day in self._groups

    def group(self, day: date) -> tuple[Log, ...]:
        """Return the logs for ``day`` (empty when the day has none)."""

        return tuple(self._groups.get(day, ()))

    def add(self, log: Log) -> None:
        """Add one log, binary-inserting its key when the day is new."""

        group = self._groups.get(log.date)
        if group is not None:
            group.append(log)
            return

        self._groups[log.date] = [log]
        bisect.insort(self._keys, log.date, key=_descending)
        logger.debug(f"Date index gained day {log.date.isoformat()}")

    def remove(self, log: Log) -> None:
        """Remove one log, dropping its key once the day is empty."""

        group = self._groups.get(log.date)
        if not group or log not in group:
            return

        group.remove(log)
        if not group:
            del self._groups[log.date]
            position = self.position(log.date)
            del self._keys[position]

    def position(self, day: date) -> int:
        """Return the insertion position of ``day`` in the descending keys.

        This is the number of keys strictly more recent than ``day``.
        """
        return bisect.bisect_left(self._keys, _descending(day), key=_descending)

    def nearest_at_or_before(self, day: date) -> date | None:
        """Return the most recent key that is not after ``day``."""

        return resolve(day, self._keys)

    def count_since(self, cutoff: date) -> int:
        """Count logs whose day is on or after ``cutoff``."""

        end = bisect.bisect_right(self._keys, _descending(cutoff), key=_descending)
        return sum(len(self._groups[key]) for key in self._keys[:end])
