from django.contrib import admin

from apps.scheduling.admin import ServiceDeleteMixin
from apps.scheduling.services import AssignmentService

from .models import StaffMember


@admin.register(StaffMember)
class StaffMemberAdmin(ServiceDeleteMixin, admin.ModelAdmin):
    service_delete = AssignmentService.delete_staff_member

    list_display = ("name", "role", "subspecialty", "id")
    list_filter = ("role",)
    search_fields = ("name", "subspecialty")
    ordering = ("name",)
