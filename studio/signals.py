"""Django signals for catalog cache invalidation.

Keys are dropped once the surrounding transaction commits, so a concurrent
read cannot re-cache rows that are about to change.
"""

from django.core.cache import cache
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from studio.models import Event, Occurrence


def event_list_key(active_only: bool) -> str:
    return f"events:list:{'active' if active_only else 'all'}"


def event_detail_key(event_id) -> str:
    return f"events:{event_id}"


def invalidate_event(event_id) -> None:
    """Drop both cached catalog lists and the detail entry for one event."""
    cache.delete_many([event_list_key(True), event_list_key(False), event_detail_key(event_id)])


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    event_id = instance.pk
    transaction.on_commit(lambda: invalidate_event(event_id))


@receiver([post_save, post_delete], sender=Occurrence)
def invalidate_occurrence_cache(sender, instance, **kwargs):
    """Invalidate the parent event's caches when an occurrence changes."""
    event_id = instance.event_id
    transaction.on_commit(lambda: invalidate_event(event_id))
