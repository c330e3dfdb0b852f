from django.contrib import admin

from studio.models import (
    Attendance,
    Event,
    ExerciseCategory,
    Occurrence,
    Registration,
    WellnessAssessment,
)


class OccurrenceInline(admin.TabularInline):
    model = Occurrence
    extra = 0
    fields = ["date_time", "capacity", "is_active"]


class AttendanceInline(admin.StackedInline):
    model = Attendance
    extra = 0


class WellnessAssessmentInline(admin.TabularInline):
    model = WellnessAssessment
    extra = 0
    readonly_fields = ["created_at", "completed_at"]


@admin.register(ExerciseCategory)
class ExerciseCategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "is_active", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["name"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = [
        "name",
        "category",
        "recurrence_type",
        "start_date",
        "end_date",
        "capacity",
        "is_active",
        "is_deleted",
    ]
    list_filter = ["recurrence_type", "is_active", "is_deleted", "category"]
    search_fields = ["name"]
    inlines = [OccurrenceInline]


@admin.register(Occurrence)
class OccurrenceAdmin(admin.ModelAdmin):
    list_display = ["event", "date_time", "capacity", "is_active"]
    list_filter = ["is_active", "event"]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["user", "event", "occurrence", "code", "created_at"]
    list_filter = ["event"]
    search_fields = ["code", "user__email"]
    inlines = [AttendanceInline, WellnessAssessmentInline]
