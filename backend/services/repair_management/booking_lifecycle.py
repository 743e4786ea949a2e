"""
Booking operations.

Booking creation is gated by the offer's SENT -> ACCEPTED compare-and-swap:
of two concurrent attempts on one offer exactly one gets past it, the other
fails with InvalidStateError. Status changes cascade into the request state
machine (cancel -> BIDDING_CLOSED, done -> COMPLETED).
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from repairs.models import Booking, Offer, RepairRequest
from .exceptions import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from .offer_lifecycle import accept_offer
from .request_lifecycle import transition_request

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

Status = Booking.Status

# source -> allowed targets
BOOKING_TRANSITIONS = {
    Status.CONFIRMED: {Status.RESCHEDULED, Status.CANCELLED, Status.DONE, Status.NO_SHOW},
    Status.RESCHEDULED: {Status.RESCHEDULED, Status.CANCELLED, Status.DONE, Status.NO_SHOW},
    Status.NO_SHOW: {Status.RESCHEDULED, Status.CANCELLED},
    Status.CANCELLED: set(),
    Status.DONE: set(),
}

# Booking status -> request status it drives the request to
REQUEST_CASCADE = {
    Status.CANCELLED: RepairRequest.Status.BIDDING_CLOSED,
    Status.DONE: RepairRequest.Status.COMPLETED,
}


def compute_commission(price, rate: Optional[Decimal] = None) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Split a price into (total_amount, commission, workshop_amount).

    The commission is rounded half-up to cents; the workshop gets the exact
    remainder so the three amounts always add up.
    """
    rate = Decimal(str(settings.COMMISSION_RATE if rate is None else rate))
    total_amount = Decimal(str(price)).quantize(CENT, rounding=ROUND_HALF_UP)
    commission = (total_amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)
    workshop_amount = total_amount - commission
    return total_amount, commission, workshop_amount


def create_booking_from_offer(
    offer_id: int,
    customer,
    scheduled_at: datetime,
    notes: str = "",
) -> Booking:
    """
    Book the workshop behind a SENT offer.

    Within one transaction, in order: offer SENT -> ACCEPTED (CAS), booking
    insert, request -> BOOKED.

    Raises:
        NotFoundError: If the offer does not exist
        ForbiddenError: If the offer is on another customer's request
        InvalidStateError: If the offer is not SENT (or was just taken or
            repriced), or the request cannot be booked
        InvalidInputError: If ``scheduled_at`` is missing
    """
    try:
        offer = Offer.objects.select_related("request", "workshop").get(pk=offer_id)
    except Offer.DoesNotExist:
        raise NotFoundError("Offer not found")

    if offer.request.customer_id != customer.id:
        raise ForbiddenError("You can only book offers on your own requests")

    if offer.status != Offer.Status.SENT:
        raise InvalidStateError("Offer is not available for booking")

    if scheduled_at is None:
        raise InvalidInputError("scheduled_at is required")

    total_amount, commission, workshop_amount = compute_commission(offer.price)

    try:
        with transaction.atomic():
            # Bills the price read above; a changed price loses the swap
            if not accept_offer(offer.id, price=offer.price):
                logger.warning("Booking race lost on offer %s", offer.id)
                raise InvalidStateError("Offer is not available for booking")

            booking = Booking.objects.create(
                request_id=offer.request_id,
                offer=offer,
                customer=customer,
                workshop=offer.workshop,
                scheduled_at=scheduled_at,
                status=Status.CONFIRMED,
                total_amount=total_amount,
                commission=commission,
                workshop_amount=workshop_amount,
                notes=notes or "",
            )

            transition_request(offer.request_id, RepairRequest.Status.BOOKED)
    except IntegrityError:
        # One booking per offer is also enforced by the one-to-one column
        logger.warning("Duplicate booking blocked by constraint on offer %s", offer.id)
        raise InvalidStateError("Offer is not available for booking")

    logger.info(
        "Booking %s created from offer %s (total=%s commission=%s)",
        booking.id, offer.id, total_amount, commission,
    )

    from notifications.dispatch import notify_booking_confirmed
    notify_booking_confirmed(booking)

    return booking


def update_booking(
    booking_id: int,
    actor,
    status: Optional[str] = None,
    scheduled_at: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> Booking:
    """
    Cancel, reschedule, complete or annotate a booking.

    Supplying only ``scheduled_at`` reschedules (status RESCHEDULED).

    Raises:
        NotFoundError: If the booking does not exist
        ForbiddenError: Unless the actor is the booking's customer or an admin
        InvalidInputError: On an unknown status
        InvalidStateError: If the booking cannot move to the new status
    """
    try:
        booking = Booking.objects.select_related("workshop", "customer").get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError("Booking not found")

    if booking.customer_id != actor.id and not actor.is_platform_admin:
        raise ForbiddenError("You can only update your own bookings")

    if status is not None and status not in Status.values:
        raise InvalidInputError(f"Unknown booking status: {status}")

    new_status = status
    if new_status is None and scheduled_at is not None:
        new_status = Status.RESCHEDULED

    changes = {}
    if new_status is not None:
        if new_status not in BOOKING_TRANSITIONS[booking.status]:
            raise InvalidStateError(f"Booking cannot move from {booking.status} to {new_status}")
        changes["status"] = new_status
    if scheduled_at is not None:
        changes["scheduled_at"] = scheduled_at
    if notes is not None:
        changes["notes"] = notes

    if not changes:
        return booking

    with transaction.atomic():
        updated = Booking.objects.filter(pk=booking.pk, status=booking.status).update(
            updated_at=timezone.now(), **changes
        )
        if not updated:
            logger.warning("Booking %s changed concurrently; update rejected", booking.pk)
            raise InvalidStateError("Booking was modified by another request, reload and retry")

        cascade = REQUEST_CASCADE.get(new_status)
        if cascade is not None:
            transition_request(booking.request_id, cascade)

    booking.refresh_from_db()
    if new_status is not None:
        logger.info("Booking %s -> %s by user %s", booking.id, new_status, actor.id)

        from notifications.dispatch import notify_booking_status_changed
        notify_booking_status_changed(booking)

    return booking


# ===================== Queries =====================

def get_customer_bookings(customer):
    return (
        Booking.objects.filter(customer=customer)
        .select_related("request__vehicle", "offer", "workshop")
    )


def get_workshop_bookings(workshop):
    return (
        Booking.objects.filter(workshop=workshop, offer__status=Offer.Status.ACCEPTED)
        .select_related("request__vehicle", "offer", "customer")
    )
