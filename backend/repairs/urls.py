# repairs/urls.py

from django.urls import path

from .views.requests import (
    VehicleListCreateView,
    InspectionReportUploadView,
    RepairRequestListCreateView,
    RepairRequestDetailView,
    RepairRequestCancelView,
    RepairRequestOffersView,
)
from .views.offers import OfferCreateView, OfferUpdateView, WorkshopOffersView
from .views.bookings import BookingCreateView, MyBookingsView, BookingUpdateView
from .views.reviews import ReviewCreateView, BookingReviewView

app_name = "repairs"

urlpatterns = [
    # VEHICLES & REPORTS
    path("vehicles/", VehicleListCreateView.as_view(), name="vehicles"),
    path("reports/", InspectionReportUploadView.as_view(), name="upload-report"),

    # REQUESTS
    path("requests/", RepairRequestListCreateView.as_view(), name="requests"),
    path("requests/<int:request_id>/", RepairRequestDetailView.as_view(), name="request-detail"),
    path("requests/<int:request_id>/cancel/", RepairRequestCancelView.as_view(), name="cancel-request"),
    path("requests/<int:request_id>/offers/", RepairRequestOffersView.as_view(), name="request-offers"),

    # OFFERS
    path("offers/", OfferCreateView.as_view(), name="create-offer"),
    path("offers/mine/", WorkshopOffersView.as_view(), name="my-offers"),
    path("offers/<int:offer_id>/", OfferUpdateView.as_view(), name="update-offer"),

    # BOOKINGS
    path("bookings/", BookingCreateView.as_view(), name="create-booking"),
    path("bookings/mine/", MyBookingsView.as_view(), name="my-bookings"),
    path("bookings/<int:booking_id>/", BookingUpdateView.as_view(), name="update-booking"),

    # REVIEWS
    path("reviews/", ReviewCreateView.as_view(), name="create-review"),
    path("reviews/booking/<int:booking_id>/", BookingReviewView.as_view(), name="booking-review"),
]
