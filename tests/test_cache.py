"""Tests for cache behavior.

Invalidation runs on commit, so each test captures the on-commit callbacks
of the test transaction.
Run with: pytest tests/test_cache.py -v
"""

from datetime import date, datetime, timezone

import pytest
from django.core.cache import cache

from studio.models import Event, Occurrence
from studio.signals import event_detail_key, event_list_key


@pytest.fixture
def event(db_category):
    return Event.objects.create(
        name="Core",
        start_date=date(2030, 1, 7),
        end_date=date(2030, 1, 7),
        time_of_day="10:00",
        capacity=5,
        category=db_category,
    )


def prime(event_id) -> None:
    cache.set(event_list_key(True), ["cached"])
    cache.set(event_list_key(False), ["cached"])
    cache.set(event_detail_key(event_id), {"cached": True})


def assert_cleared(event_id) -> None:
    assert cache.get(event_list_key(True)) is None
    assert cache.get(event_list_key(False)) is None
    assert cache.get(event_detail_key(event_id)) is None


@pytest.mark.django_db
class TestCacheInvalidation:
    """Tests for cache invalidation on model changes."""

    def test_event_save_invalidates_list_and_detail_cache(
        self, event, django_capture_on_commit_callbacks
    ):
        """Saving an event invalidates the events:list and events:{id} keys."""
        prime(event.pk)
        with django_capture_on_commit_callbacks(execute=True):
            event.name = "Core Plus"
            event.save()
        assert_cleared(event.pk)

    def test_event_delete_invalidates_cache(self, event, django_capture_on_commit_callbacks):
        event_id = event.pk
        prime(event_id)
        with django_capture_on_commit_callbacks(execute=True):
            event.delete()
        assert_cleared(event_id)

    def test_occurrence_save_invalidates_parent_event_cache(
        self, event, django_capture_on_commit_callbacks
    ):
        """Saving an occurrence invalidates its event's cached entries."""
        prime(event.pk)
        with django_capture_on_commit_callbacks(execute=True):
            Occurrence.objects.create(
                event=event, date_time=datetime(2030, 1, 7, 10, tzinfo=timezone.utc), capacity=5
            )
        assert_cleared(event.pk)

    def test_invalidation_waits_for_commit(self, event, django_capture_on_commit_callbacks):
        """Until the transaction commits, readers keep the previous cached entries."""
        prime(event.pk)
        with django_capture_on_commit_callbacks() as callbacks:
            event.name = "Core Plus"
            event.save()
            assert cache.get(event_detail_key(event.pk)) == {"cached": True}

        assert len(callbacks) == 1
        callbacks[0]()
        assert_cleared(event.pk)

    def test_other_events_detail_cache_untouched(
        self, event, db_category, django_capture_on_commit_callbacks
    ):
        other = Event.objects.create(
            name="Stretch",
            start_date=date(2030, 1, 8),
            end_date=date(2030, 1, 8),
            time_of_day="11:00",
            capacity=5,
            category=db_category,
        )
        cache.set(event_detail_key(other.pk), {"cached": True})
        with django_capture_on_commit_callbacks(execute=True):
            event.save()
        assert cache.get(event_detail_key(other.pk)) == {"cached": True}
