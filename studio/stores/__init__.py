from studio.stores.interfaces import (
    AssessmentStore,
    EventStore,
    OccurrenceStore,
    RegistrationStore,
    StudioStore,
)
from studio.stores.memory_store import MemoryStudioStore

__all__ = [
    "AssessmentStore",
    "EventStore",
    "MemoryStudioStore",
    "OccurrenceStore",
    "RegistrationStore",
    "StudioStore",
]
