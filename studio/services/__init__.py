from studio.services.attendance_service import AttendanceService
from studio.services.capacity_service import CapacityService
from studio.services.event_service import EventInput, EventService
from studio.services.occurrence_service import OccurrenceService
from studio.services.registration_service import RegistrationService
from studio.services.wellness_service import WellnessService, calculate_impact

__all__ = [
    "AttendanceService",
    "CapacityService",
    "EventInput",
    "EventService",
    "OccurrenceService",
    "RegistrationService",
    "WellnessService",
    "calculate_impact",
]
