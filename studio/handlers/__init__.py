from studio.handlers.views import (
    AssessmentDetailView,
    CompleteAssessmentView,
    CompletedAssessmentListView,
    EventAttendanceListView,
    EventAttendanceStatsView,
    EventAvailabilityView,
    EventDetailView,
    EventListView,
    EventOccurrenceListView,
    EventRegistrationListView,
    MarkAttendanceView,
    MyRegistrationListView,
    OccurrenceAvailabilityView,
    OccurrenceDeactivateView,
    OccurrenceDetailView,
    OccurrenceRegistrationListView,
    PendingAssessmentListView,
    RegistrationAssessmentListView,
    RegistrationByCodeView,
    RegistrationDetailView,
    RegistrationImpactView,
    RegistrationListView,
)

__all__ = [
    "AssessmentDetailView",
    "CompleteAssessmentView",
    "CompletedAssessmentListView",
    "EventAttendanceListView",
    "EventAttendanceStatsView",
    "EventAvailabilityView",
    "EventDetailView",
    "EventListView",
    "EventOccurrenceListView",
    "EventRegistrationListView",
    "MarkAttendanceView",
    "MyRegistrationListView",
    "OccurrenceAvailabilityView",
    "OccurrenceDeactivateView",
    "OccurrenceDetailView",
    "OccurrenceRegistrationListView",
    "PendingAssessmentListView",
    "RegistrationAssessmentListView",
    "RegistrationByCodeView",
    "RegistrationDetailView",
    "RegistrationImpactView",
    "RegistrationListView",
]
