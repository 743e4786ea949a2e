"""
Repair request state machine.

Every status change goes through ``transition_request``, which applies it as
a single conditional UPDATE on the allowed source statuses. Offer and booking
operations call into this module instead of writing ``status`` directly.
"""

import logging
from datetime import datetime
from typing import Optional

from django.db import transaction
from django.utils import timezone

from repairs.models import Booking, InspectionReport, Offer, RepairRequest, Vehicle
from .exceptions import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

Status = RepairRequest.Status

# source -> allowed targets
TRANSITIONS = {
    Status.NEW: {Status.IN_BIDDING, Status.BOOKED, Status.CANCELLED},
    Status.IN_BIDDING: {Status.BOOKED, Status.CANCELLED},
    # A cancelled booking leaves the request closed to new offers; the
    # customer may still book one of the outstanding offers.
    Status.BIDDING_CLOSED: {Status.BOOKED, Status.CANCELLED},
    Status.BOOKED: {Status.BIDDING_CLOSED, Status.COMPLETED, Status.CANCELLED},
    Status.COMPLETED: set(),
    Status.CANCELLED: set(),
}

OPEN_FOR_OFFERS = (Status.NEW, Status.IN_BIDDING)

ACTIVE_BOOKING_STATUSES = (
    Booking.Status.CONFIRMED,
    Booking.Status.RESCHEDULED,
    Booking.Status.NO_SHOW,
)


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, set())


def sources_for(target: str):
    """All statuses from which ``target`` is reachable in one step."""
    return [source for source, targets in TRANSITIONS.items() if target in targets]


def transition_request(request_id: int, target: str) -> None:
    """
    Move a request to ``target`` if its current status allows it.

    Raises:
        NotFoundError: If the request does not exist
        InvalidStateError: If the current status has no edge to ``target``
    """
    updated = RepairRequest.objects.filter(
        pk=request_id,
        status__in=sources_for(target),
    ).update(status=target, updated_at=timezone.now())

    if updated:
        logger.info("Request %s -> %s", request_id, target)
        return

    current = RepairRequest.objects.filter(pk=request_id).values_list("status", flat=True).first()
    if current is None:
        raise NotFoundError("Request not found")
    raise InvalidStateError(f"Request cannot move from {current} to {target}")


def mark_in_bidding(request_id: int) -> bool:
    """
    First offer on a NEW request opens bidding.

    Returns False when another offer already did it; that is not an error.
    """
    updated = RepairRequest.objects.filter(pk=request_id, status=Status.NEW).update(
        status=Status.IN_BIDDING, updated_at=timezone.now()
    )
    if updated:
        logger.info("Request %s -> %s", request_id, Status.IN_BIDDING)
    return bool(updated)


def open_requests(now: Optional[datetime] = None):
    """Requests a workshop may discover and bid on."""
    now = now or timezone.now()
    return RepairRequest.objects.filter(status__in=OPEN_FOR_OFFERS, expires_at__gt=now)


# ===================== Customer Operations =====================

def create_repair_request(
    customer,
    vehicle_id: int,
    report_id: int,
    latitude,
    longitude,
    address: str,
    city: str,
    expires_at: datetime,
    description: str = "",
    postal_code: str = "",
    country: str = "SE",
) -> RepairRequest:
    """
    Post a new repair request for bidding.

    Raises:
        NotFoundError: If the vehicle or inspection report does not exist
        InvalidInputError: If ``expires_at`` is not in the future
    """
    if expires_at <= timezone.now():
        raise InvalidInputError("expires_at must be in the future")

    if not Vehicle.objects.filter(pk=vehicle_id).exists():
        raise NotFoundError("Vehicle not found")
    if not InspectionReport.objects.filter(pk=report_id).exists():
        raise NotFoundError("Inspection report not found")

    repair_request = RepairRequest.objects.create(
        customer=customer,
        vehicle_id=vehicle_id,
        report_id=report_id,
        description=description,
        latitude=latitude,
        longitude=longitude,
        address=address,
        city=city,
        postal_code=postal_code,
        country=country,
        expires_at=expires_at,
        status=Status.NEW,
    )
    logger.info("Request %s created by customer %s", repair_request.id, customer.id)
    return repair_request


def get_request_for(actor, request_id: int) -> RepairRequest:
    """Fetch a request the actor is allowed to see (owner or admin)."""
    try:
        repair_request = RepairRequest.objects.select_related("vehicle", "report", "customer").get(pk=request_id)
    except RepairRequest.DoesNotExist:
        raise NotFoundError("Request not found")

    if repair_request.customer_id != actor.id and not actor.is_platform_admin:
        raise ForbiddenError("You can only access your own requests")
    return repair_request


def get_customer_requests(customer):
    return (
        RepairRequest.objects.filter(customer=customer)
        .select_related("vehicle", "report")
        .prefetch_related("offers__workshop", "bookings")
    )


@transaction.atomic
def cancel_repair_request(actor, request_id: int) -> RepairRequest:
    """
    Explicitly cancel a request (owner or admin).

    Outstanding SENT offers expire; an active booking is cancelled along with
    the request.
    """
    repair_request = get_request_for(actor, request_id)

    transition_request(repair_request.id, Status.CANCELLED)

    # Not keyed on the status read above: a booking may have landed since
    cancelled = Booking.objects.filter(
        request_id=repair_request.id,
        status__in=ACTIVE_BOOKING_STATUSES,
    ).update(status=Booking.Status.CANCELLED, updated_at=timezone.now())
    if cancelled:
        logger.info("Cancelled %d active booking(s) of request %s", cancelled, repair_request.id)

    workshop_emails = list(
        repair_request.offers.filter(status=Offer.Status.SENT).values_list("workshop__email", flat=True)
    )
    repair_request.offers.filter(status=Offer.Status.SENT).update(
        status=Offer.Status.EXPIRED, updated_at=timezone.now()
    )

    from notifications.dispatch import notify_request_cancelled
    notify_request_cancelled(repair_request, workshop_emails)

    repair_request.refresh_from_db()
    return repair_request
