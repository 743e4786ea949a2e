from django.core.validators import RegexValidator
from rest_framework import serializers

from workshops.models import Workshop, DEFAULT_LATITUDE, DEFAULT_LONGITUDE

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

_clock_time = RegexValidator(r"^([01]\d|2[0-3]):[0-5]\d$", "Use HH:MM (24h) format.")


class DayHoursSerializer(serializers.Serializer):
    open = serializers.CharField(validators=[_clock_time])
    close = serializers.CharField(validators=[_clock_time])

    def validate(self, data):
        if data["close"] <= data["open"]:
            raise serializers.ValidationError("Closing time must be after opening time")
        return data


class OpeningHoursSerializer(serializers.Serializer):
    """
    Typed weekly opening hours.

    Days left out are closed:
    {"monday": {"open": "08:00", "close": "17:00"}, "saturday": {...}}
    """

    def get_fields(self):
        return {day: DayHoursSerializer(required=False) for day in WEEKDAYS}

    def to_internal_value(self, data):
        if isinstance(data, dict):
            unknown = set(data) - set(WEEKDAYS)
            if unknown:
                raise serializers.ValidationError(
                    {day: "Unknown weekday" for day in sorted(unknown)}
                )
        return super().to_internal_value(data)


class WorkshopStructuredFieldsMixin:
    """Validation shared by every serializer that writes opening hours or brands."""

    def validate_opening_hours(self, value):
        ser = OpeningHoursSerializer(data=value)
        ser.is_valid(raise_exception=True)
        return {day: dict(hours) for day, hours in ser.validated_data.items()}

    def validate_brands_handled(self, value):
        if not isinstance(value, list) or not all(isinstance(b, str) for b in value):
            raise serializers.ValidationError("Expected a list of brand names")
        return sorted({b.strip() for b in value if b.strip()})


class WorkshopRegistrationSerializer(WorkshopStructuredFieldsMixin, serializers.ModelSerializer):
    """Workshop details submitted together with a WORKSHOP account registration."""
    latitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, min_value=-90, max_value=90,
        required=False, default=DEFAULT_LATITUDE,
    )
    longitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, min_value=-180, max_value=180,
        required=False, default=DEFAULT_LONGITUDE,
    )
    opening_hours = serializers.JSONField(required=False, default=dict)
    brands_handled = serializers.JSONField(required=False, default=list)

    class Meta:
        model = Workshop
        fields = [
            "company_name",
            "organization_number",
            "phone",
            "website",
            "description",
            "address",
            "city",
            "postal_code",
            "latitude",
            "longitude",
            "opening_hours",
            "brands_handled",
        ]

    def validate_organization_number(self, value):
        if Workshop.objects.filter(organization_number=value).exists():
            raise serializers.ValidationError("A workshop with this organization number already exists")
        return value


class WorkshopProfileSerializer(WorkshopStructuredFieldsMixin, serializers.ModelSerializer):
    """
    Full workshop profile, used by the owning workshop to view and patch its data.
    """
    user_email = serializers.EmailField(source="user.email", read_only=True)
    opening_hours = serializers.JSONField(required=False)
    brands_handled = serializers.JSONField(required=False)

    class Meta:
        model = Workshop
        fields = [
            "id",
            "user_email",
            "company_name",
            "organization_number",
            "phone",
            "email",
            "website",
            "description",
            "address",
            "city",
            "postal_code",
            "country",
            "latitude",
            "longitude",
            "opening_hours",
            "brands_handled",
            "is_verified",
            "is_active",
            "rating",
            "review_count",
        ]
        read_only_fields = [
            "id",
            "organization_number",
            "is_verified",
            "is_active",
            "rating",
            "review_count",
        ]


class WorkshopBasicSerializer(serializers.ModelSerializer):
    """
    Lite version of workshop info embedded in offers, bookings and reviews.
    """

    class Meta:
        model = Workshop
        fields = ["id", "company_name", "city", "rating", "review_count", "is_verified"]


class WorkshopVerificationSerializer(serializers.Serializer):
    """Admin toggle for workshop verification / activation."""
    is_verified = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)


class AvailableRequestsQuerySerializer(serializers.Serializer):
    """Query parameters for the available-requests search."""
    latitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, min_value=-90, max_value=90, required=False
    )
    longitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, min_value=-180, max_value=180, required=False
    )
    radius = serializers.FloatField(required=False, min_value=0.1)
