from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from accounts.serializers import UserBasicSerializer
from workshops.serializers import WorkshopBasicSerializer
from .models import Booking, InspectionReport, Offer, RepairRequest, Review, Vehicle

MAX_REPORT_SIZE = 10 * 1024 * 1024
ALLOWED_REPORT_TYPES = ("image/jpeg", "image/jpg", "image/png", "application/pdf")


class VehicleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vehicle
        fields = ["id", "make", "model", "year", "created_at"]
        read_only_fields = ["id", "created_at"]

    def validate_year(self, value):
        if not 1900 <= value <= timezone.now().year + 1:
            raise serializers.ValidationError("Year is out of range")
        return value


class InspectionReportSerializer(serializers.ModelSerializer):
    file_url = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = InspectionReport
        fields = ["id", "file_name", "file_size", "mime_type", "file_url", "created_at"]

    def get_file_url(self, obj):
        if not obj.file:
            return None
        request = self.context.get("request")
        if request:
            return request.build_absolute_uri(obj.file.url)
        return obj.file.url


class InspectionReportUploadSerializer(serializers.Serializer):
    """Multipart upload of an inspection report (JPG, PNG or PDF, max 10MB)."""
    file = serializers.FileField()

    def validate_file(self, value):
        if value.size > MAX_REPORT_SIZE:
            raise serializers.ValidationError("File too large. Maximum size is 10MB.")
        if getattr(value, "content_type", None) not in ALLOWED_REPORT_TYPES:
            raise serializers.ValidationError("Invalid file type. Only JPG, PNG, and PDF are allowed.")
        return value


# ==================== Requests ====================

class RepairRequestCreateSerializer(serializers.Serializer):
    """Serializer for creating repair requests"""
    vehicle_id = serializers.IntegerField()
    report_id = serializers.IntegerField()
    description = serializers.CharField(required=False, allow_blank=True, default="")
    latitude = serializers.DecimalField(max_digits=9, decimal_places=6, min_value=-90, max_value=90)
    longitude = serializers.DecimalField(max_digits=9, decimal_places=6, min_value=-180, max_value=180)
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    country = serializers.CharField(max_length=2, required=False, default="SE")
    expires_at = serializers.DateTimeField()


class OfferSummarySerializer(serializers.ModelSerializer):
    """Offer as shown inside a request listing"""
    workshop = WorkshopBasicSerializer(read_only=True)

    class Meta:
        model = Offer
        fields = ["id", "price", "note", "status", "workshop", "created_at"]


class BookingSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Booking
        fields = ["id", "status", "scheduled_at", "total_amount", "workshop", "offer"]


class RepairRequestSerializer(serializers.ModelSerializer):
    """Serializer for repair requests"""
    customer = UserBasicSerializer(read_only=True)
    vehicle = VehicleSerializer(read_only=True)
    report = InspectionReportSerializer(read_only=True)

    class Meta:
        model = RepairRequest
        fields = ["id", "customer", "vehicle", "report", "description",
                  "latitude", "longitude", "address", "city", "postal_code", "country",
                  "status", "expires_at", "created_at", "updated_at"]
        read_only_fields = fields


class CustomerRepairRequestSerializer(RepairRequestSerializer):
    """Customer's own request, with the offers and bookings attached to it"""
    offers = OfferSummarySerializer(many=True, read_only=True)
    bookings = BookingSummarySerializer(many=True, read_only=True)

    class Meta(RepairRequestSerializer.Meta):
        fields = RepairRequestSerializer.Meta.fields + ["offers", "bookings"]
        read_only_fields = fields


class AvailableRequestSerializer(RepairRequestSerializer):
    """Request shown to a workshop browsing nearby work, with distance in km"""
    distance = serializers.FloatField(read_only=True)

    class Meta(RepairRequestSerializer.Meta):
        fields = RepairRequestSerializer.Meta.fields + ["distance"]
        read_only_fields = fields


# ==================== Offers ====================

class OfferCreateSerializer(serializers.Serializer):
    request_id = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    note = serializers.CharField(required=False, allow_blank=True, default="")
    available_dates = serializers.ListField(child=serializers.DateTimeField(), required=False, default=list)
    estimated_duration = serializers.IntegerField(required=False, allow_null=True, min_value=1, default=None)
    warranty = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")

    def validate_available_dates(self, value):
        # Stored as JSON, so keep ISO strings
        return [dt.isoformat() for dt in value]


class OfferUpdateSerializer(serializers.Serializer):
    """Partial patch of an offer; ``status`` only accepts DECLINED."""
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"), required=False)
    note = serializers.CharField(required=False, allow_blank=True)
    available_dates = serializers.ListField(child=serializers.DateTimeField(), required=False)
    estimated_duration = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    warranty = serializers.CharField(required=False, allow_blank=True, max_length=255)
    status = serializers.ChoiceField(choices=Offer.Status.choices, required=False)

    def validate_available_dates(self, value):
        return [dt.isoformat() for dt in value]


class OfferSerializer(serializers.ModelSerializer):
    workshop = WorkshopBasicSerializer(read_only=True)
    request = RepairRequestSerializer(read_only=True)

    class Meta:
        model = Offer
        fields = ["id", "request", "workshop", "price", "note", "available_dates",
                  "estimated_duration", "warranty", "status", "created_at", "updated_at"]
        read_only_fields = fields


# ==================== Bookings ====================

class BookingCreateSerializer(serializers.Serializer):
    offer_id = serializers.IntegerField()
    scheduled_at = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BookingUpdateSerializer(serializers.Serializer):
    """Serializer for booking cancel / reschedule / completion"""
    status = serializers.ChoiceField(choices=Booking.Status.choices, required=False)
    scheduled_at = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class BookingSerializer(serializers.ModelSerializer):
    request = RepairRequestSerializer(read_only=True)
    offer = OfferSummarySerializer(read_only=True)
    customer = UserBasicSerializer(read_only=True)
    workshop = WorkshopBasicSerializer(read_only=True)

    class Meta:
        model = Booking
        fields = ["id", "request", "offer", "customer", "workshop", "scheduled_at", "status",
                  "total_amount", "commission", "workshop_amount", "notes",
                  "created_at", "updated_at"]
        read_only_fields = fields


# ==================== Reviews ====================

class ReviewCreateSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    workshop_id = serializers.IntegerField(required=False)
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, default="")


class ReviewSerializer(serializers.ModelSerializer):
    customer = UserBasicSerializer(read_only=True)
    workshop = WorkshopBasicSerializer(read_only=True)

    class Meta:
        model = Review
        fields = ["id", "booking", "customer", "workshop", "rating", "comment",
                  "is_published", "created_at"]
        read_only_fields = fields


# ==================== Payouts ====================

class PayoutQuerySerializer(serializers.Serializer):
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=1970, max_value=9999)


class PayoutReportSerializer(serializers.Serializer):
    id = serializers.CharField()
    workshop_id = serializers.IntegerField()
    workshop_name = serializers.CharField()
    month = serializers.IntegerField()
    year = serializers.IntegerField()
    total_jobs = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    commission = serializers.DecimalField(max_digits=14, decimal_places=2)
    workshop_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    is_paid = serializers.BooleanField()
