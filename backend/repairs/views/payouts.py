# repairs/views/payouts.py

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsPlatformAdmin
from repairs.serializers import PayoutQuerySerializer, PayoutReportSerializer
from services.payouts import aggregate_payouts


class PayoutListView(APIView):
    """
    GET ?month=&year=: Monthly payout reports. Without both parameters the
    list is empty.
    POST {"month", "year"}: Same report; missing parameters are an error.
    """
    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    def get(self, request):
        if not request.query_params.get("month") or not request.query_params.get("year"):
            return Response([])

        serializer = PayoutQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return Response(self._reports(**serializer.validated_data))

    def post(self, request):
        serializer = PayoutQuerySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(self._reports(**serializer.validated_data))

    @staticmethod
    def _reports(month, year):
        reports = aggregate_payouts(month, year)
        return PayoutReportSerializer([r.to_dict() for r in reports], many=True).data
