from django.contrib import admin
from workshops.models import Workshop


@admin.register(Workshop)
class WorkshopAdmin(admin.ModelAdmin):
    """Admin panel for managing workshops and their verification"""

    list_display = [
        "company_name",
        "organization_number",
        "city",
        "is_verified",
        "is_active",
        "rating",
        "review_count",
    ]

    list_filter = [
        "is_verified",
        "is_active",
        "city",
    ]

    search_fields = [
        "company_name",
        "organization_number",
        "user__email",
    ]

    readonly_fields = [
        "rating",
        "review_count",
        "created_at",
        "updated_at",
    ]

    ordering = ("company_name",)
