# Platform administration endpoints (at /api/admin/)

from django.urls import path

from repairs.views.payouts import PayoutListView
from workshops.views import WorkshopVerificationView

app_name = "platform_admin"

urlpatterns = [
    path("payouts/", PayoutListView.as_view(), name="payouts"),
    path("workshops/<int:workshop_id>/verification/", WorkshopVerificationView.as_view(), name="workshop-verification"),
]
