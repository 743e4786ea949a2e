# repairs/views/bookings.py

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsCustomer
from repairs.serializers import BookingCreateSerializer, BookingSerializer, BookingUpdateSerializer
from services.repair_management import (
    create_booking_from_offer,
    get_customer_bookings,
    get_workshop_bookings,
    update_booking,
)
from workshops.services import get_workshop_for


class BookingCreateView(APIView):
    """
    POST: Customer books the workshop behind one of the offers on their request.
    """
    permission_classes = [IsAuthenticated, IsCustomer]

    def post(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = create_booking_from_offer(
            offer_id=data["offer_id"],
            customer=request.user,
            scheduled_at=data["scheduled_at"],
            notes=data.get("notes", ""),
        )
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class MyBookingsView(APIView):
    """
    GET: Bookings of the caller, as customer or as workshop.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if request.user.role == request.user.ROLE_WORKSHOP:
            bookings = get_workshop_bookings(get_workshop_for(request.user))
        else:
            bookings = get_customer_bookings(request.user)
        return Response(BookingSerializer(bookings.order_by("-created_at"), many=True).data)


class BookingUpdateView(APIView):
    """
    PATCH: Cancel, reschedule, complete or annotate a booking.
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request, booking_id: int):
        serializer = BookingUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        booking = update_booking(booking_id, request.user, **serializer.validated_data)
        return Response(BookingSerializer(booking).data)
