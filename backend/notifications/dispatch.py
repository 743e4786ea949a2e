"""
Notification helpers called by the lifecycle services.

None of these functions raise: a failing notification must never fail
the operation that triggered it.
"""

import logging

from django.db import transaction

from .emails import render
from .tasks import send_email_task

logger = logging.getLogger(__name__)


def notify(event: str, recipient: str, **context) -> None:
    """Queue an email for ``event`` once the current transaction commits."""
    if not recipient:
        logger.debug("Skipping %s notification: no recipient", event)
        return

    try:
        subject, body = render(event, **context)
    except Exception:
        logger.exception("Failed to render %s notification", event)
        return

    def _send():
        try:
            send_email_task.delay(recipient, subject, body)
        except Exception:
            logger.exception("Failed to queue %s notification for %s", event, recipient)

    transaction.on_commit(_send)


# ---------------------- Lifecycle milestones ----------------------

def notify_registration(user) -> None:
    if user.role == "WORKSHOP" and hasattr(user, "workshop"):
        notify("workshop_registration_pending", user.email, company_name=user.workshop.company_name)
    else:
        notify("customer_registered", user.email, name=user.first_name)


def notify_offer_received(offer) -> None:
    notify(
        "offer_received",
        offer.request.customer.email,
        request_id=offer.request_id,
        company_name=offer.workshop.company_name,
        price=offer.price,
    )


def notify_booking_confirmed(booking) -> None:
    notify(
        "booking_confirmed",
        booking.workshop.email,
        booking_id=booking.id,
        scheduled_at=booking.scheduled_at.isoformat(),
    )


def notify_booking_status_changed(booking) -> None:
    notify(
        "booking_status_changed",
        booking.workshop.email,
        booking_id=booking.id,
        status=booking.status,
    )
    notify(
        "booking_status_changed",
        booking.customer.email,
        booking_id=booking.id,
        status=booking.status,
    )


def notify_request_cancelled(repair_request, workshop_emails) -> None:
    for email in workshop_emails:
        notify("request_cancelled", email, request_id=repair_request.id)
