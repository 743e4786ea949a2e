"""
Services package - Business logic layer.

This package contains all business logic services that operate on Django models
but are decoupled from the HTTP layer.

Modules:
    - repair_management: Request, offer, booking and review lifecycle
    - matching: Finding open requests near a workshop
    - payouts: Monthly payout reports over completed bookings
"""

# Expose commonly used functions at package level
from .matching import find_available_requests
from .payouts import aggregate_payouts, PayoutReport
from .repair_management import (
    create_repair_request,
    cancel_repair_request,
    create_offer,
    update_offer,
    create_booking_from_offer,
    update_booking,
    create_review,
    NotFoundError,
    InvalidStateError,
    ForbiddenError,
    ConflictError,
    InvalidInputError,
)

__all__ = [
    # Matching
    "find_available_requests",
    # Payouts
    "aggregate_payouts",
    "PayoutReport",
    # Repair management
    "create_repair_request",
    "cancel_repair_request",
    "create_offer",
    "update_offer",
    "create_booking_from_offer",
    "update_booking",
    "create_review",
    # Exceptions
    "NotFoundError",
    "InvalidStateError",
    "ForbiddenError",
    "ConflictError",
    "InvalidInputError",
]
