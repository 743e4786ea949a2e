# repairs/views/requests.py

from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsCustomer
from repairs.models import InspectionReport, Vehicle
from repairs.serializers import (
    CustomerRepairRequestSerializer,
    InspectionReportSerializer,
    InspectionReportUploadSerializer,
    OfferSerializer,
    RepairRequestCreateSerializer,
    RepairRequestSerializer,
    VehicleSerializer,
)
from services.repair_management import (
    cancel_repair_request,
    create_repair_request,
    get_customer_requests,
    get_request_for,
    get_request_offers,
)


class VehicleListCreateView(APIView):
    """
    GET: Customer's registered vehicles.
    POST: Register a vehicle (make, model, year).
    """
    permission_classes = [IsAuthenticated, IsCustomer]

    def get(self, request):
        vehicles = Vehicle.objects.filter(owner=request.user).order_by("-created_at")
        return Response(VehicleSerializer(vehicles, many=True).data)

    def post(self, request):
        serializer = VehicleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vehicle = serializer.save(owner=request.user)
        return Response(VehicleSerializer(vehicle).data, status=status.HTTP_201_CREATED)


class InspectionReportUploadView(APIView):
    """
    POST (multipart): Upload an inspection report (JPG, PNG or PDF, max 10MB).
    """
    permission_classes = [IsAuthenticated, IsCustomer]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        serializer = InspectionReportUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        upload = serializer.validated_data["file"]

        report = InspectionReport.objects.create(
            file=upload,
            file_name=upload.name,
            file_size=upload.size,
            mime_type=upload.content_type,
            uploaded_by=request.user,
        )
        return Response(
            InspectionReportSerializer(report, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )


class RepairRequestListCreateView(APIView):
    """
    GET: Customer's own repair requests, with offers and bookings.
    POST: Post a new repair request for bidding.
    """
    permission_classes = [IsAuthenticated, IsCustomer]

    def get(self, request):
        requests = get_customer_requests(request.user).order_by("-created_at")
        serializer = CustomerRepairRequestSerializer(requests, many=True, context={"request": request})
        return Response(serializer.data)

    def post(self, request):
        serializer = RepairRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        repair_request = create_repair_request(customer=request.user, **serializer.validated_data)

        return Response(
            RepairRequestSerializer(repair_request, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )


class RepairRequestDetailView(APIView):
    """
    GET: A single request (owner or admin).
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, request_id: int):
        repair_request = get_request_for(request.user, request_id)
        serializer = CustomerRepairRequestSerializer(repair_request, context={"request": request})
        return Response(serializer.data)


class RepairRequestCancelView(APIView):
    """
    POST: Cancel a request. Outstanding offers expire and an active booking
    is cancelled with it.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, request_id: int):
        repair_request = cancel_repair_request(request.user, request_id)
        return Response({
            "message": "Request cancelled",
            "request": RepairRequestSerializer(repair_request, context={"request": request}).data,
        })


class RepairRequestOffersView(APIView):
    """
    GET: Offers on a request. Workshops only see their own.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, request_id: int):
        offers = get_request_offers(request.user, request_id).order_by("price", "created_at")
        return Response(OfferSerializer(offers, many=True, context={"request": request}).data)
