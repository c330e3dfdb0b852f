"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from studio.domain import RecurrencePattern, RecurrenceType
from studio.services import (
    AttendanceService,
    EventInput,
    EventService,
    OccurrenceService,
    RegistrationService,
    WellnessService,
)
from studio.stores import MemoryStudioStore

# Monday, 1 January 2024, before the first class of the day.
START = datetime(2024, 1, 1, 6, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock the tests can move forward."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(START)


@pytest.fixture
def store(clock) -> MemoryStudioStore:
    store = MemoryStudioStore(clock=clock)
    store.add_user(1, "ana@example.com")
    store.add_user(2, "ben@example.com")
    return store


@pytest.fixture
def category(store):
    return store.add_category("Yoga")


@pytest.fixture
def event_service(store, clock) -> EventService:
    return EventService(store, clock)


@pytest.fixture
def occurrence_service(store, clock) -> OccurrenceService:
    return OccurrenceService(store, clock)


@pytest.fixture
def registration_service(store, clock) -> RegistrationService:
    return RegistrationService(store, clock)


@pytest.fixture
def attendance_service(store, clock) -> AttendanceService:
    return AttendanceService(store, clock)


@pytest.fixture
def wellness_service(store, clock) -> WellnessService:
    return WellnessService(store, clock)


def _weekly_input(category_id, capacity: int = 10, **overrides) -> EventInput:
    fields = {
        "name": "Morning Flow",
        "start_date": date(2024, 1, 1),
        "end_date": date(2024, 1, 10),
        "time_of_day": "09:00",
        "capacity": capacity,
        "category_id": category_id,
        "recurrence_type": RecurrenceType.WEEKLY,
        "recurrence_pattern": RecurrencePattern(weekdays=(1, 3)),
    }
    fields.update(overrides)
    return EventInput(**fields)


@pytest.fixture
def weekly_input(category):
    """Factory for Monday and Wednesday 09:00 classes from 1 to 10 January 2024."""

    def build(**overrides) -> EventInput:
        overrides.setdefault("category_id", category.id)
        return _weekly_input(**overrides)

    return build


@pytest.fixture
def weekly_event(event_service, weekly_input):
    """EventDetail for a four-occurrence weekly class with ten seats each."""
    return event_service.create(weekly_input(), creator_id=99)


@pytest.fixture
def first_occurrence(weekly_event):
    return weekly_event.occurrences[0]


@pytest.fixture
def member(django_user_model):
    return django_user_model.objects.create_user(
        username="member", email="member@example.com", password="member-pass"
    )


@pytest.fixture
def staff(django_user_model):
    return django_user_model.objects.create_user(
        username="staff", email="staff@example.com", password="staff-pass", is_staff=True
    )


@pytest.fixture
def db_category(db):
    from studio.models import ExerciseCategory

    return ExerciseCategory.objects.create(name="Pilates")
