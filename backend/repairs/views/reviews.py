# repairs/views/reviews.py

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsCustomer
from repairs.serializers import ReviewCreateSerializer, ReviewSerializer
from services.repair_management import create_review, get_booking_review


class ReviewCreateView(APIView):
    """
    POST: Customer reviews one of their bookings (once).
    """
    permission_classes = [IsAuthenticated, IsCustomer]

    def post(self, request):
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = create_review(customer=request.user, **serializer.validated_data)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


class BookingReviewView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, booking_id: int):
        review = get_booking_review(booking_id)
        return Response(ReviewSerializer(review).data)
