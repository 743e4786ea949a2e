# repairs/views/offers.py

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsWorkshop
from repairs.serializers import OfferCreateSerializer, OfferSerializer, OfferUpdateSerializer
from services.repair_management import create_offer, get_workshop_offers, update_offer
from workshops.services import get_workshop_for


class OfferCreateView(APIView):
    """
    POST: Workshop bids on an open repair request.
    """
    permission_classes = [IsAuthenticated, IsWorkshop]

    def post(self, request):
        serializer = OfferCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        workshop = get_workshop_for(request.user)
        offer = create_offer(workshop=workshop, **serializer.validated_data)

        return Response(OfferSerializer(offer).data, status=status.HTTP_201_CREATED)


class OfferUpdateView(APIView):
    """
    PATCH: Edit a SENT offer, or withdraw it with {"status": "DECLINED"}.
    """
    permission_classes = [IsAuthenticated, IsWorkshop]

    def patch(self, request, offer_id: int):
        serializer = OfferUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        workshop = get_workshop_for(request.user)
        offer = update_offer(offer_id, workshop, **serializer.validated_data)

        return Response(OfferSerializer(offer).data)


class WorkshopOffersView(APIView):
    """
    GET: Every offer the calling workshop has made.
    """
    permission_classes = [IsAuthenticated, IsWorkshop]

    def get(self, request):
        workshop = get_workshop_for(request.user)
        offers = get_workshop_offers(workshop).order_by("-created_at")
        return Response(OfferSerializer(offers, many=True).data)
