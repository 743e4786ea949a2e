from decimal import Decimal

from django.db import models
from django.conf import settings

User = settings.AUTH_USER_MODEL

# Used when a workshop registers without coordinates (Stockholm)
DEFAULT_LATITUDE = Decimal("59.329300")
DEFAULT_LONGITUDE = Decimal("18.068600")


class Workshop(models.Model):
    """Repair shop profile attached to a WORKSHOP user."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='workshop')

    # Company details
    company_name = models.CharField(max_length=200)
    organization_number = models.CharField(max_length=30, unique=True)
    phone = models.CharField(max_length=20)
    email = models.EmailField()
    website = models.URLField(blank=True)
    description = models.TextField(blank=True)

    # Location
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=2, default='SE')
    latitude = models.DecimalField(max_digits=9, decimal_places=6)
    longitude = models.DecimalField(max_digits=9, decimal_places=6)

    # {"monday": {"open": "08:00", "close": "17:00"}, ...}
    opening_hours = models.JSONField(default=dict, blank=True)
    brands_handled = models.JSONField(default=list, blank=True)

    # Moderation & reputation
    is_verified = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    review_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'workshops'
        ordering = ['company_name']

    def __str__(self):
        return f"{self.company_name} ({self.organization_number})"
