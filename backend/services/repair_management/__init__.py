"""
Repair management service - request, offer, booking and review lifecycle.

This module handles:
    - Creating and cancelling repair requests
    - Submitting, patching and withdrawing offers
    - Booking an offer and moving bookings through their statuses
    - Reviews on bookings
"""

from .request_lifecycle import (
    create_repair_request,
    cancel_repair_request,
    transition_request,
    open_requests,
    get_request_for,
    get_customer_requests,
)
from .offer_lifecycle import (
    create_offer,
    update_offer,
    accept_offer,
    expire_stale_offers,
    get_request_offers,
    get_workshop_offers,
)
from .booking_lifecycle import (
    compute_commission,
    create_booking_from_offer,
    update_booking,
    get_customer_bookings,
    get_workshop_bookings,
)
from .review_gate import (
    create_review,
    get_workshop_reviews,
    get_booking_review,
)

from .exceptions import (
    LifecycleError,
    NotFoundError,
    InvalidStateError,
    ForbiddenError,
    ConflictError,
    InvalidInputError,
)

__all__ = [
    # Requests
    "create_repair_request",
    "cancel_repair_request",
    "transition_request",
    "open_requests",
    "get_request_for",
    "get_customer_requests",
    # Offers
    "create_offer",
    "update_offer",
    "accept_offer",
    "expire_stale_offers",
    "get_request_offers",
    "get_workshop_offers",
    # Bookings
    "compute_commission",
    "create_booking_from_offer",
    "update_booking",
    "get_customer_bookings",
    "get_workshop_bookings",
    # Reviews
    "create_review",
    "get_workshop_reviews",
    "get_booking_review",
    # Exceptions
    "LifecycleError",
    "NotFoundError",
    "InvalidStateError",
    "ForbiddenError",
    "ConflictError",
    "InvalidInputError",
]
