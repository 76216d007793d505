"""URL patterns for the scheduling API."""
from django.urls import path
from . import views

app_name = "scheduling"

urlpatterns = [
    path("board/", views.BoardView.as_view(), name="board"),
    path("categories/", views.CategoryListView.as_view(), name="categories"),
    path("categories/<str:category_id>/", views.CategoryDetailView.as_view(), name="category_detail"),
    path("assignments/", views.AssignmentListView.as_view(), name="assignments"),
    path("assignments/move/", views.MoveAssignmentView.as_view(), name="assignment_move"),
    path("assignments/swap/", views.SwapAssignmentView.as_view(), name="assignment_swap"),
    path(
        "assignments/<int:day>/<str:category_id>/",
        views.AssignmentDetailView.as_view(),
        name="assignment_detail",
    ),
]
