from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.conf import settings


class Vehicle(models.Model):
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='vehicles'
    )
    make = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    year = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'vehicles'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.make} {self.model} ({self.year})"


class InspectionReport(models.Model):
    """Uploaded inspection report; requests only reference it by id."""

    file = models.FileField(upload_to='inspection_reports/%Y/%m/')
    file_name = models.CharField(max_length=255)
    file_size = models.PositiveIntegerField()
    mime_type = models.CharField(max_length=100)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='inspection_reports'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'inspection_reports'

    def __str__(self):
        return self.file_name


class RepairRequest(models.Model):
    """A customer's posted repair job seeking bids from workshops."""

    class Status(models.TextChoices):
        NEW = 'NEW', 'New'
        IN_BIDDING = 'IN_BIDDING', 'In bidding'
        BIDDING_CLOSED = 'BIDDING_CLOSED', 'Bidding closed'
        BOOKED = 'BOOKED', 'Booked'
        COMPLETED = 'COMPLETED', 'Completed'
        CANCELLED = 'CANCELLED', 'Cancelled'

    # Foreign keys
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='repair_requests'
    )
    vehicle = models.ForeignKey(Vehicle, on_delete=models.PROTECT, related_name='repair_requests')
    report = models.ForeignKey(InspectionReport, on_delete=models.PROTECT, related_name='repair_requests')

    description = models.TextField(blank=True)

    # Location
    latitude = models.DecimalField(max_digits=9, decimal_places=6)
    longitude = models.DecimalField(max_digits=9, decimal_places=6)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20, blank=True, default='')
    country = models.CharField(max_length=2, default='SE')

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.NEW)
    expires_at = models.DateTimeField()

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'repair_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'expires_at'], name='repair_req_open_idx'),
        ]

    def __str__(self):
        return f"Request #{self.id} - {self.customer} - {self.status}"


class Offer(models.Model):
    """A workshop's bid against a repair request."""

    class Status(models.TextChoices):
        SENT = 'SENT', 'Sent'
        ACCEPTED = 'ACCEPTED', 'Accepted'
        DECLINED = 'DECLINED', 'Declined'
        EXPIRED = 'EXPIRED', 'Expired'

    request = models.ForeignKey(
        RepairRequest,
        on_delete=models.CASCADE,
        related_name='offers'
    )

    workshop = models.ForeignKey(
        'workshops.Workshop',
        on_delete=models.CASCADE,
        related_name='offers'
    )

    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))])
    note = models.TextField(blank=True)
    # ISO-8601 datetimes the workshop can take the job
    available_dates = models.JSONField(default=list, blank=True)
    estimated_duration = models.PositiveIntegerField(null=True, blank=True, help_text="Hours")
    warranty = models.CharField(max_length=255, blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.SENT)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'offers'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['request', 'workshop'],
                name='unique_request_workshop_offer'
            )
        ]

    def __str__(self):
        return f"Offer #{self.id} - Request {self.request_id} -> {self.workshop}"


class Booking(models.Model):
    """The confirmed engagement created from an accepted offer."""

    class Status(models.TextChoices):
        CONFIRMED = 'CONFIRMED', 'Confirmed'
        RESCHEDULED = 'RESCHEDULED', 'Rescheduled'
        CANCELLED = 'CANCELLED', 'Cancelled'
        DONE = 'DONE', 'Done'
        NO_SHOW = 'NO_SHOW', 'No show'

    request = models.ForeignKey(RepairRequest, on_delete=models.PROTECT, related_name='bookings')
    offer = models.OneToOneField(Offer, on_delete=models.PROTECT, related_name='booking')
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='bookings'
    )
    workshop = models.ForeignKey('workshops.Workshop', on_delete=models.PROTECT, related_name='bookings')

    scheduled_at = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.CONFIRMED)

    # total_amount == commission + workshop_amount
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    commission = models.DecimalField(max_digits=12, decimal_places=2)
    workshop_amount = models.DecimalField(max_digits=12, decimal_places=2)

    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='booking_status_created_idx'),
        ]

    def __str__(self):
        return f"Booking #{self.id} - {self.workshop} - {self.status}"


class Review(models.Model):
    booking = models.OneToOneField(Booking, on_delete=models.CASCADE, related_name='review')
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reviews'
    )
    workshop = models.ForeignKey('workshops.Workshop', on_delete=models.CASCADE, related_name='reviews')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True)
    is_published = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']

    def __str__(self):
        return f"Review #{self.id} - {self.workshop} - {self.rating}/5"
