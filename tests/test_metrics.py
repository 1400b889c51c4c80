"""Tests for derived metrics."""

from datetime import date

import pytest

from activity_timeline.date_index import DateIndex
from activity_timeline.errors import ValidationError
from activity_timeline.metrics import MetricsAggregator, average, compute_metrics
from activity_timeline.models import Comment, Log, Role

TODAY = date(2024, 3, 10)


def _log(log_id, day, comments=0):
    log = Log(id=log_id, date=day, author_id=1, content="entry")
    log.comments.extend(
        Comment(id=i + 1, author=Role.ADMIN, content="c") for i in range(comments)
    )
    return log


def test_empty_log_set():
    metrics = compute_metrics([], TODAY)
    assert metrics.total_logs == 0
    assert metrics.total_comments == 0
    assert metrics.average_comments_per_log == 0
    assert metrics.logs_in_trailing_window == 0


def test_average_two_decimals():
    logs = [
        _log(1, date(2024, 3, 1), 1),
        _log(2, date(2024, 3, 2), 2),
        _log(3, date(2024, 3, 3), 0),
    ]
    metrics = compute_metrics(logs, TODAY)
    assert metrics.total_comments == 3
    assert metrics.average_comments_per_log == 1.00
    assert average(2, 3) == 0.67
    assert average(1, 8) == 0.13


def test_trailing_window_includes_boundary_day():
    logs = [
        _log(1, date(2024, 3, 3)),
        _log(2, date(2024, 3, 2)),
        _log(3, date(2024, 3, 10)),
    ]
    metrics = compute_metrics(logs, TODAY, window_days=7)
    assert metrics.logs_in_trailing_window == 2


def test_compute_is_order_independent():
    logs = [_log(1, date(2024, 3, 1), 2), _log(2, date(2024, 3, 9), 1)]
    assert compute_metrics(logs, TODAY) == compute_metrics(list(reversed(logs)), TODAY)


def test_aggregator_matches_full_compute():
    logs = [
        _log(1, date(2024, 3, 1), 1),
        _log(2, date(2024, 3, 5), 2),
        _log(3, date(2024, 2, 1), 0),
    ]
    index = DateIndex(logs)
    aggregator = MetricsAggregator(index, lambda: TODAY)
    aggregator.reset(logs)

    assert aggregator.snapshot() == compute_metrics(logs, TODAY)
    assert aggregator.logs_in_trailing_window(40) == 3


def test_negative_window_is_rejected():
    with pytest.raises(ValidationError):
        compute_metrics([_log(1, TODAY)], TODAY, window_days=-1)

    aggregator = MetricsAggregator(DateIndex(), lambda: TODAY)
    with pytest.raises(ValidationError):
        aggregator.logs_in_trailing_window(-3)
