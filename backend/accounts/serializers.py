from django.db import transaction
from rest_framework import serializers
from django.contrib.auth import authenticate
from .models import User
from workshops.models import Workshop
from workshops.serializers import WorkshopRegistrationSerializer


class UserSerializer(serializers.ModelSerializer):
    workshop_id = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "role",
            "phone_number",
            "address",
            "city",
            "postal_code",
            "country",
            "workshop_id",
        ]
        read_only_fields = ["id", "email", "role", "workshop_id"]

    def get_workshop_id(self, obj):
        workshop = getattr(obj, "workshop", None) if obj.role == User.ROLE_WORKSHOP else None
        return workshop.id if workshop else None


class UserBasicSerializer(serializers.ModelSerializer):
    """
    Basic customer representation embedded in requests and bookings.
    """
    class Meta:
        model = User
        fields = ["id", "first_name", "last_name", "email", "phone_number"]


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        user = authenticate(username=data["email"].strip().lower(), password=data["password"])
        if not user:
            raise serializers.ValidationError("Invalid email or password")
        return user


class RegisterSerializer(serializers.ModelSerializer):
    """
    Register a customer or a workshop account.

    Workshop accounts must include a ``workshop`` object with the company
    details; the Workshop profile is created in the same transaction and
    awaits admin verification.
    """
    password = serializers.CharField(write_only=True, min_length=6)
    role = serializers.ChoiceField(choices=[User.ROLE_CUSTOMER, User.ROLE_WORKSHOP], default=User.ROLE_CUSTOMER)
    workshop = WorkshopRegistrationSerializer(required=False)

    class Meta:
        model = User
        fields = ['email', 'password', 'first_name', 'last_name', 'role', 'phone_number',
                  'address', 'city', 'postal_code', 'workshop']

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email address already exists")
        return value

    def validate(self, data):
        # If registering as workshop, company details are required
        if data['role'] == User.ROLE_WORKSHOP and not data.get('workshop'):
            raise serializers.ValidationError({
                'workshop': 'Workshop details are required for workshop accounts'
            })
        return data

    @transaction.atomic
    def create(self, validated_data):
        workshop_data = validated_data.pop('workshop', None)
        password = validated_data.pop('password')

        user = User.objects.create_user(
            username=validated_data['email'],
            password=password,
            **validated_data,
        )

        # Create workshop profile if role is workshop
        if user.role == User.ROLE_WORKSHOP and workshop_data:
            Workshop.objects.create(
                user=user,
                email=user.email,
                **workshop_data,
            )

        return user
