"""Engagement metrics derived from the current log set."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable

from activity_timeline.date_index import DateIndex
from activity_timeline.errors import ValidationError
from activity_timeline.models import Log

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 7


@dataclass(frozen=True)
class Metrics:
    total_logs: int
    total_comments: int
    average_comments_per_log: float
    logs_in_trailing_window: int
    trailing_window_days: int = DEFAULT_WINDOW_DAYS

    def to_dict(self) -> dict:
        return asdict(self)


def average(total_comments: int, total_logs: int) -> float:
    """Comments per log rounded half-up to two decimals; 0 for no logs."""

    if total_logs == 0:
        return 0.0
    ratio = Decimal(total_comments) / Decimal(total_logs)
    return float(ratio.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def window_start(today: date, days: int) -> date:
    """Return the first day included in a trailing window of ``days``."""

    if days < 0:
        raise ValidationError(f"Trailing window must not be negative, got {days}")
    return today - timedelta(days=days)


def compute_metrics(
    logs: Iterable[Log],
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> Metrics:
    """Compute metrics from scratch over ``logs``.

    Args:
        logs: Current log set, in any order.
        today: Reference day for the trailing window.
        window_days: Size of the trailing window; the boundary day counts.

    Returns:
        A Metrics snapshot.
    """
    cutoff = window_start(today, window_days)
    total_logs = 0
    total_comments = 0
    recent = 0
    for log in logs:
        total_logs += 1
        total_comments += len(log.comments)
        if log.date >= cutoff:
            recent += 1

    return Metrics(
        total_logs=total_logs,
        total_comments=total_comments,
        average_comments_per_log=average(total_comments, total_logs),
        logs_in_trailing_window=recent,
        trailing_window_days=window_days,
    )


class MetricsAggregator:
    """Keeps running totals updated from store deltas.

    Trailing-window counts are read off the date index, so only the two
    totals need to be tracked here.
    """

    def __init__(
        self,
        index: DateIndex,
        today: Callable[[], date],
        window_days: int = DEFAULT_WINDOW_DAYS,
    ):
        self.index = index
        self.today = today
        self.window_days = window_days
        self.total_logs = 0
        self.total_comments = 0

    def reset(self, logs: Iterable[Log]) -> None:
        self.total_logs = 0
        self.total_comments = 0
        for log in logs:
            self.log_added(log)

    def log_added(self, log: Log) -> None:
        self.total_logs += 1
        self.total_comments += len(log.comments)

    def comment_added(self) -> None:
        self.total_comments += 1

    def logs_in_trailing_window(self, days: int | None = None) -> int:
        """Count logs dated on or after ``today - days``."""

        days = self.window_days if days is None else days
        return self.index.count_since(window_start(self.today(), days))

    def snapshot(self) -> Metrics:
        metrics = Metrics(
            total_logs=self.total_logs,
            total_comments=self.total_comments,
            average_comments_per_log=average(self.total_comments, self.total_logs),
            logs_in_trailing_window=self.logs_in_trailing_window(),
            trailing_window_days=self.window_days,
        )
        logger.debug(f"Metrics snapshot: {metrics}")
        return metrics
