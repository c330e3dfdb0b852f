"""Seat accounting for occurrences."""

from studio.domain import Availability, Occurrence, OccurrenceId
from studio.domain.errors import NotFoundError
from studio.services.base import parse_id
from studio.stores.interfaces import OccurrenceStore


class CapacityService:
    """Computes live availability; counts are never cached past one call."""

    def __init__(self, store: OccurrenceStore) -> None:
        self._store = store

    def availability(self, occurrence_id: OccurrenceId | str) -> Availability:
        """Return capacity, registered and available seats for an occurrence.

        Raises:
            InvalidIdError: If the occurrence_id is not a valid UUID.
            NotFoundError: If the occurrence does not exist.
        """
        occurrence_id = parse_id(OccurrenceId, occurrence_id, "occurrence")
        occurrence = self._store.get_occurrence(occurrence_id)
        if occurrence is None:
            raise NotFoundError("Occurrence", occurrence_id)
        return self.availability_for(occurrence)

    def availability_for(self, occurrence: Occurrence) -> Availability:
        return Availability(
            capacity=occurrence.capacity,
            registered=self._store.count_registrations(occurrence.id),
        )

    def has_capacity(self, occurrence_id: OccurrenceId | str) -> bool:
        """Advisory pre-check; admission re-checks under the occurrence lock."""
        return self.availability(occurrence_id).available > 0
