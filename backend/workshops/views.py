from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsPlatformAdmin, IsWorkshop
from repairs.serializers import AvailableRequestSerializer, ReviewSerializer
from services.matching import find_available_requests
from services.repair_management import get_workshop_reviews
from workshops import services
from workshops.serializers import (
    AvailableRequestsQuerySerializer,
    WorkshopProfileSerializer,
    WorkshopVerificationSerializer,
)


class WorkshopProfileView(APIView):
    permission_classes = [IsAuthenticated, IsWorkshop]

    def get(self, request):
        workshop = services.get_workshop_for(request.user)
        return Response(WorkshopProfileSerializer(workshop).data)

    def patch(self, request):
        workshop = services.get_workshop_for(request.user)
        serializer = WorkshopProfileSerializer(workshop, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class WorkshopStatsView(APIView):
    """
    GET: Dashboard counters (open requests, offers, completed jobs, revenue).
    """
    permission_classes = [IsAuthenticated, IsWorkshop]

    def get(self, request):
        workshop = services.get_workshop_for(request.user)
        return Response(services.get_workshop_stats(workshop))


class AvailableRequestsView(APIView):
    """
    GET: Open repair requests near the workshop, ordered by distance
    (closest first) rather than by creation date.

    Query params (all optional):
        latitude, longitude: search centre, defaults to the workshop address
        radius: km, defaults to DEFAULT_SEARCH_RADIUS_KM
    """
    permission_classes = [IsAuthenticated, IsWorkshop]

    def get(self, request):
        query = AvailableRequestsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        workshop = services.get_workshop_for(request.user)
        matches = find_available_requests(
            workshop,
            latitude=params.get("latitude"),
            longitude=params.get("longitude"),
            radius_km=params.get("radius"),
        )

        serializer = AvailableRequestSerializer(matches, many=True, context={"request": request})
        return Response({
            "count": len(matches),
            "results": serializer.data,
        })


class WorkshopReviewsView(APIView):
    """GET: Published reviews of a workshop. Public."""
    permission_classes = [AllowAny]

    def get(self, request, workshop_id: int):
        reviews = get_workshop_reviews(workshop_id).order_by("-created_at")
        return Response(ReviewSerializer(reviews, many=True).data)


class WorkshopVerificationView(APIView):
    """
    PATCH: Admin verifies / activates a workshop.
    """
    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    def patch(self, request, workshop_id: int):
        serializer = WorkshopVerificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        workshop = services.set_verification(workshop_id, **serializer.validated_data)
        return Response(WorkshopProfileSerializer(workshop).data)
