"""
Offer operations: bidding, patching/withdrawal, acceptance and expiry.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from django.db import IntegrityError, transaction
from django.utils import timezone

from repairs.models import Offer, RepairRequest
from .exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from .request_lifecycle import OPEN_FOR_OFFERS, mark_in_bidding

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = ("price", "note", "available_dates", "estimated_duration", "warranty")

# Status values a workshop may set on its own offer
WORKSHOP_SETTABLE_STATUSES = {Offer.Status.DECLINED}


def _validate_price(price) -> Decimal:
    try:
        price = Decimal(str(price))
    except (ArithmeticError, ValueError, TypeError):
        raise InvalidInputError("Price must be a number")
    if not price.is_finite() or price <= 0:
        raise InvalidInputError("Price must be greater than zero")
    return price


@transaction.atomic
def create_offer(
    workshop,
    request_id: int,
    price,
    note: str = "",
    available_dates: Optional[list] = None,
    estimated_duration: Optional[int] = None,
    warranty: str = "",
) -> Offer:
    """
    Submit a workshop's bid on a repair request.

    Args:
        workshop: Workshop instance of the bidding workshop
        request_id: ID of the request to bid on
        price: Offered price

    Returns:
        The created Offer (status SENT)

    Raises:
        NotFoundError: If the workshop or request does not exist
        InvalidStateError: If the request is not open for offers
        ConflictError: If this workshop already has an offer on the request
    """
    if workshop is None:
        raise NotFoundError("Workshop not found")

    price = _validate_price(price)

    # Short row lock so the request cannot be booked between the check and the insert
    try:
        repair_request = (
            RepairRequest.objects.select_for_update()
            .select_related("customer")
            .get(pk=request_id)
        )
    except RepairRequest.DoesNotExist:
        raise NotFoundError("Request not found")

    if repair_request.status not in OPEN_FOR_OFFERS:
        raise InvalidStateError("Request is not available for offers")

    if Offer.objects.filter(request=repair_request, workshop=workshop).exists():
        raise ConflictError("Offer already exists for this request")

    try:
        with transaction.atomic():
            offer = Offer.objects.create(
                request=repair_request,
                workshop=workshop,
                price=price,
                note=note,
                available_dates=available_dates or [],
                estimated_duration=estimated_duration,
                warranty=warranty,
                status=Offer.Status.SENT,
            )
    except IntegrityError:
        # Lost the race against a concurrent offer from the same workshop
        logger.warning("Duplicate offer blocked by constraint: request=%s workshop=%s", request_id, workshop.id)
        raise ConflictError("Offer already exists for this request")

    if repair_request.status == RepairRequest.Status.NEW:
        mark_in_bidding(repair_request.id)

    logger.info("Offer %s sent by workshop %s on request %s", offer.id, workshop.id, request_id)

    from notifications.dispatch import notify_offer_received
    notify_offer_received(offer)

    return offer


def update_offer(offer_id: int, workshop, **patch) -> Offer:
    """
    Patch an offer owned by ``workshop``.

    Only SENT offers can change. ``status`` may only be set to DECLINED,
    which withdraws the offer.

    Raises:
        NotFoundError: If the offer does not exist
        ForbiddenError: If the offer belongs to another workshop
        InvalidInputError: On unknown fields or a disallowed status
        InvalidStateError: If the offer is no longer SENT
    """
    try:
        offer = Offer.objects.get(pk=offer_id)
    except Offer.DoesNotExist:
        raise NotFoundError("Offer not found")

    if workshop is None or offer.workshop_id != workshop.id:
        raise ForbiddenError("You do not have permission to update this offer")

    changes = {}
    for field, value in patch.items():
        if field == "status":
            if value not in WORKSHOP_SETTABLE_STATUSES:
                raise InvalidInputError("Offers can only be withdrawn (DECLINED) by the workshop")
            changes["status"] = value
        elif field == "price":
            changes["price"] = _validate_price(value)
        elif field in PATCHABLE_FIELDS:
            changes[field] = value
        else:
            raise InvalidInputError(f"Field '{field}' cannot be updated")

    if not changes:
        return offer

    updated = Offer.objects.filter(pk=offer.pk, status=Offer.Status.SENT).update(
        updated_at=timezone.now(), **changes
    )
    if not updated:
        offer.refresh_from_db(fields=["status"])
        raise InvalidStateError(f"Offer is {offer.status} and can no longer be changed")

    logger.info("Offer %s updated by workshop %s: %s", offer.id, workshop.id, sorted(changes))
    offer.refresh_from_db()
    return offer


def accept_offer(offer_id: int, price: Optional[Decimal] = None) -> bool:
    """
    Atomic SENT -> ACCEPTED compare-and-swap.

    With ``price`` the swap also requires the offer to still carry that
    price, so a concurrent price patch makes it fail.

    Returns True only for the single caller that flipped the status.
    """
    filters = {"pk": offer_id, "status": Offer.Status.SENT}
    if price is not None:
        filters["price"] = price
    return Offer.objects.filter(**filters).update(
        status=Offer.Status.ACCEPTED, updated_at=timezone.now()
    ) == 1


def expire_stale_offers(now: Optional[datetime] = None) -> Tuple[int, int]:
    """
    Expire SENT offers on requests whose bidding window has passed.

    Returns a tuple of (expired_offers, affected_requests).
    """
    now = now or timezone.now()
    stale = Offer.objects.filter(
        status=Offer.Status.SENT,
        request__status__in=OPEN_FOR_OFFERS,
        request__expires_at__lte=now,
    )
    request_ids = set(stale.values_list("request_id", flat=True))
    expired = Offer.objects.filter(
        pk__in=list(stale.values_list("pk", flat=True)),
        status=Offer.Status.SENT,
    ).update(status=Offer.Status.EXPIRED, updated_at=now)

    if expired:
        logger.info("Expired %d offer(s) across %d request(s)", expired, len(request_ids))
    return expired, len(request_ids)


# ===================== Queries =====================

def get_request_offers(actor, request_id: int):
    """
    Offers on a request, visible to the request owner, an admin, or a
    workshop (which only sees its own offer).
    """
    try:
        repair_request = RepairRequest.objects.get(pk=request_id)
    except RepairRequest.DoesNotExist:
        raise NotFoundError("Request not found")

    offers = Offer.objects.filter(request=repair_request).select_related("workshop")
    if repair_request.customer_id == actor.id or actor.is_platform_admin:
        return offers

    workshop = getattr(actor, "workshop", None)
    if workshop is not None:
        return offers.filter(workshop=workshop)
    raise ForbiddenError("You can only view offers on your own requests")


def get_workshop_offers(workshop):
    return (
        Offer.objects.filter(workshop=workshop)
        .select_related("request__vehicle", "request__customer")
    )
