from django.urls import path

from .views import (
    WorkshopProfileView,
    WorkshopStatsView,
    AvailableRequestsView,
    WorkshopReviewsView,
)

app_name = "workshops"

urlpatterns = [
    path("profile/", WorkshopProfileView.as_view(), name="profile"),
    path("stats/", WorkshopStatsView.as_view(), name="stats"),
    path("requests/available/", AvailableRequestsView.as_view(), name="available-requests"),
    path("<int:workshop_id>/reviews/", WorkshopReviewsView.as_view(), name="reviews"),
]
