"""Subject/body builders for every notification event."""

from typing import Callable, Dict, Tuple

Template = Callable[..., Tuple[str, str]]


def _customer_registered(name=""):
    return (
        "Welcome to the workshop marketplace",
        f"Hi {name or 'there'},\n\nYour account has been created. "
        "Upload an inspection report to start receiving offers from workshops.",
    )


def _workshop_registration_pending(company_name=""):
    return (
        "Workshop registration received",
        f"Hi {company_name},\n\nYour workshop registration has been received and is "
        "awaiting administrator approval. You will get an email once it has been reviewed.",
    )


def _offer_received(request_id=None, company_name="", price=""):
    return (
        "New offer on your repair request",
        f"{company_name} sent an offer of {price} for request #{request_id}.",
    )


def _booking_confirmed(booking_id=None, scheduled_at=""):
    return (
        "New booking confirmed",
        f"Booking #{booking_id} has been confirmed for {scheduled_at}.",
    )


def _booking_status_changed(booking_id=None, status=""):
    return (
        f"Booking #{booking_id} updated",
        f"Booking #{booking_id} is now {status}.",
    )


def _request_cancelled(request_id=None):
    return (
        f"Repair request #{request_id} cancelled",
        f"Repair request #{request_id} was cancelled by the customer.",
    )


TEMPLATES: Dict[str, Template] = {
    "customer_registered": _customer_registered,
    "workshop_registration_pending": _workshop_registration_pending,
    "offer_received": _offer_received,
    "booking_confirmed": _booking_confirmed,
    "booking_status_changed": _booking_status_changed,
    "request_cancelled": _request_cancelled,
}


def render(event: str, **context) -> Tuple[str, str]:
    try:
        template = TEMPLATES[event]
    except KeyError:
        raise ValueError(f"Unknown notification event: {event}")
    return template(**context)
