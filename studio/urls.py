from django.urls import path

from studio.handlers import (
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

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path(
        "events/<str:event_id>/occurrences",
        EventOccurrenceListView.as_view(),
        name="event-occurrence-list",
    ),
    path(
        "events/<str:event_id>/availability",
        EventAvailabilityView.as_view(),
        name="event-availability",
    ),
    path(
        "events/<str:event_id>/registrations",
        EventRegistrationListView.as_view(),
        name="event-registration-list",
    ),
    path(
        "events/<str:event_id>/attendance",
        EventAttendanceListView.as_view(),
        name="event-attendance-list",
    ),
    path(
        "events/<str:event_id>/attendance/stats",
        EventAttendanceStatsView.as_view(),
        name="event-attendance-stats",
    ),
    path(
        "occurrences/<str:occurrence_id>",
        OccurrenceDetailView.as_view(),
        name="occurrence-detail",
    ),
    path(
        "occurrences/<str:occurrence_id>/availability",
        OccurrenceAvailabilityView.as_view(),
        name="occurrence-availability",
    ),
    path(
        "occurrences/<str:occurrence_id>/deactivate",
        OccurrenceDeactivateView.as_view(),
        name="occurrence-deactivate",
    ),
    path(
        "occurrences/<str:occurrence_id>/registrations",
        OccurrenceRegistrationListView.as_view(),
        name="occurrence-registration-list",
    ),
    path("registrations", RegistrationListView.as_view(), name="registration-list"),
    path("registrations/mine", MyRegistrationListView.as_view(), name="registration-mine"),
    path(
        "registrations/code/<str:code>",
        RegistrationByCodeView.as_view(),
        name="registration-by-code",
    ),
    path(
        "registrations/<str:registration_id>",
        RegistrationDetailView.as_view(),
        name="registration-detail",
    ),
    path(
        "registrations/<str:registration_id>/wellness",
        RegistrationAssessmentListView.as_view(),
        name="registration-wellness",
    ),
    path(
        "registrations/<str:registration_id>/impact",
        RegistrationImpactView.as_view(),
        name="registration-impact",
    ),
    path("attendance", MarkAttendanceView.as_view(), name="attendance-mark"),
    path("wellness/pending", PendingAssessmentListView.as_view(), name="wellness-pending"),
    path("wellness/completed", CompletedAssessmentListView.as_view(), name="wellness-completed"),
    path("wellness/<str:assessment_id>", AssessmentDetailView.as_view(), name="wellness-detail"),
    path(
        "wellness/<str:assessment_id>/complete",
        CompleteAssessmentView.as_view(),
        name="wellness-complete",
    ),
]
