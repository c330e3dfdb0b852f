from studio.domain.models import (
    Attendance,
    AttendanceStats,
    Availability,
    Event,
    EventDetail,
    ExerciseCategory,
    ImpactReport,
    Occurrence,
    RegenerationResult,
    Registration,
    WellnessAssessment,
    WellnessImpact,
)
from studio.domain.value_objects import (
    AssessmentId,
    AssessmentStatus,
    AssessmentType,
    Capacity,
    CategoryId,
    EventId,
    Identity,
    OccurrenceId,
    RecurrencePattern,
    RecurrenceType,
    RegistrationId,
    Role,
    Schedule,
    TimeOfDay,
    WellnessMetrics,
)

__all__ = [
    "Attendance",
    "AttendanceStats",
    "Availability",
    "Event",
    "EventDetail",
    "ExerciseCategory",
    "ImpactReport",
    "Occurrence",
    "RegenerationResult",
    "Registration",
    "WellnessAssessment",
    "WellnessImpact",
    "AssessmentId",
    "AssessmentStatus",
    "AssessmentType",
    "Capacity",
    "CategoryId",
    "EventId",
    "Identity",
    "OccurrenceId",
    "RecurrencePattern",
    "RecurrenceType",
    "RegistrationId",
    "Role",
    "Schedule",
    "TimeOfDay",
    "WellnessMetrics",
]
