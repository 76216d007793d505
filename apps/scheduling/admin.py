from django.contrib import admin, messages

from apps.scheduling.exceptions import SchedulingError
from apps.scheduling.services import AssignmentService

from .models import Assignment, ShiftCategory


class ServiceDeleteMixin:
    """
    Route admin deletes through AssignmentService.

    Assignment's foreign keys are PROTECT, so Django's own delete view would
    refuse. The service removes dependent assignments itself, so protected rows
    are not reported as blockers. Subclasses set `service_delete`.
    """

    service_delete = None

    def get_deleted_objects(self, objs, request):
        deleted, model_count, perms_needed, protected = super().get_deleted_objects(objs, request)
        return deleted, model_count, perms_needed, []

    def delete_model(self, request, obj):
        try:
            removed = type(self).service_delete(obj.pk)
        except SchedulingError as exc:
            self.message_user(request, exc.message, level=messages.ERROR)
            return
        self.message_user(request, f"Deleted {obj} and {removed} assignment(s).")

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            self.delete_model(request, obj)


@admin.register(ShiftCategory)
class ShiftCategoryAdmin(ServiceDeleteMixin, admin.ModelAdmin):
    service_delete = AssignmentService.delete_shift_category

    list_display = ("id", "name", "color", "created_at")
    search_fields = ("id", "name")
    ordering = ("created_at", "id")


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("day", "category", "staff", "updated_at")
    list_filter = ("category",)
    search_fields = ("staff__name", "category__name")
    ordering = ("day", "category")
