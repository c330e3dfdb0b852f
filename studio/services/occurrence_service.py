"""Occurrence queries and maintenance."""

import logging

from studio.domain import Availability, EventId, Occurrence, OccurrenceId
from studio.domain.errors import NotFoundError
from studio.services.base import Clock, default_clock, parse_id
from studio.services.capacity_service import CapacityService
from studio.stores.interfaces import StudioStore

logger = logging.getLogger(__name__)


class OccurrenceService:
    """Service for occurrence operations."""

    def __init__(self, store: StudioStore, clock: Clock = default_clock) -> None:
        self._store = store
        self._clock = clock
        self._capacity = CapacityService(store)

    def list_by_event(
        self, event_id: EventId | str, available_only: bool = False
    ) -> list[Occurrence]:
        """Return an event's occurrences; available means active and not yet started."""
        event_id = parse_id(EventId, event_id, "event")
        if available_only:
            return self._store.list_occurrences(
                event_id, active_only=True, starting_from=self._clock()
            )
        return self._store.list_occurrences(event_id)

    def get(self, occurrence_id: OccurrenceId | str) -> Occurrence:
        """Return an occurrence by ID.

        Raises:
            InvalidIdError: If the occurrence_id is not a valid UUID.
            NotFoundError: If the occurrence does not exist.
        """
        occurrence_id = parse_id(OccurrenceId, occurrence_id, "occurrence")
        occurrence = self._store.get_occurrence(occurrence_id)
        if occurrence is None:
            raise NotFoundError("Occurrence", occurrence_id)
        return occurrence

    def availability(self, occurrence_id: OccurrenceId | str) -> Availability:
        return self._capacity.availability(occurrence_id)

    def deactivate(self, occurrence_id: OccurrenceId | str) -> Occurrence:
        occurrence = self.get(occurrence_id)
        updated = self._store.set_occurrence_active(occurrence.id, False)
        logger.info("Occurrence %s deactivated", occurrence.id)
        return updated

    def future(self, event_id: EventId | str) -> list[Occurrence]:
        event_id = parse_id(EventId, event_id, "event")
        return self._store.list_occurrences(event_id, starting_from=self._clock())

    def delete_future_without_registrations(
        self, event_id: EventId | str
    ) -> tuple[int, list[Occurrence]]:
        """Delete future occurrences nobody holds a seat on.

        Returns the number deleted and the future occurrences kept because
        they have registrants. Past occurrences are not considered.
        """
        deleted = 0
        preserved: list[Occurrence] = []
        with self._store.atomic():
            for occurrence in self.future(event_id):
                if self._store.count_registrations(occurrence.id) == 0:
                    self._store.delete_occurrence(occurrence.id)
                    deleted += 1
                else:
                    preserved.append(occurrence)
        return deleted, preserved
