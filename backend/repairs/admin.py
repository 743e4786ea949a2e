"""Tells what to show in the Django admin interface for repairs app"""

from django.contrib import admin
from .models import Booking, InspectionReport, Offer, RepairRequest, Review, Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("id", "make", "model", "year", "owner")
    search_fields = ("make", "model", "owner__email")


@admin.register(InspectionReport)
class InspectionReportAdmin(admin.ModelAdmin):
    list_display = ("id", "file_name", "mime_type", "file_size", "uploaded_by", "created_at")
    search_fields = ("file_name",)


@admin.register(RepairRequest)
class RepairRequestAdmin(admin.ModelAdmin):
    """Repair Request admin"""
    list_display = ['id', 'customer', 'vehicle', 'city', 'status', 'expires_at', 'created_at']
    list_filter = ['status', 'city', 'created_at']
    search_fields = ['customer__email', 'address', 'city']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'created_at'


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = ("id", "request", "workshop", "price", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("request__id", "workshop__company_name")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "request", "workshop", "customer", "scheduled_at", "status", "total_amount", "commission")
    list_filter = ("status",)
    search_fields = ("workshop__company_name", "customer__email")
    readonly_fields = ("total_amount", "commission", "workshop_amount", "created_at", "updated_at")


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "workshop", "rating", "is_published", "created_at")
    list_filter = ("rating", "is_published")
