"""Shared fixtures for timeline tests."""

from datetime import date

import pytest

from activity_timeline.models import Person, Role
from activity_timeline.timeline import Timeline

TODAY = date(2024, 3, 10)

PEOPLE = [
    Person(id=1, name="John Doe", role=Role.TEACHER),
    Person(id=2, name="Jane Smith", role=Role.TEACHER),
    Person(id=3, name="Bob Johnson", role=Role.TEACHER),
    Person(id=10, name="Ada Admin", role=Role.ADMIN),
]


@pytest.fixture
def people():
    return list(PEOPLE)


@pytest.fixture
def timeline(people):
    return Timeline(people=people, today=lambda: TODAY)
