"""URL patterns for the staff API."""
from django.urls import path
from . import views

app_name = "staff"

urlpatterns = [
    path("", views.StaffListView.as_view(), name="list"),
    path("options/", views.StaffOptionsView.as_view(), name="options"),
    path("<str:staff_id>/", views.StaffDetailView.as_view(), name="detail"),
]
