from django.db.models import Sum

from repairs.models import Booking, Offer
from services.repair_management import open_requests
from services.repair_management.exceptions import NotFoundError
from workshops.models import Workshop


def get_workshop_for(user) -> Workshop:
    """Resolve the Workshop profile behind a WORKSHOP user."""
    try:
        return user.workshop
    except Workshop.DoesNotExist:
        raise NotFoundError("Workshop not found")


def get_workshop_stats(workshop: Workshop) -> dict:
    """
    Dashboard counters for a workshop.
    """
    offers = Offer.objects.filter(workshop=workshop)
    done = Booking.objects.filter(workshop=workshop, status=Booking.Status.DONE)

    total_revenue = done.aggregate(total=Sum("workshop_amount"))["total"]

    return {
        "total_requests": open_requests().count(),
        "active_offers": offers.filter(status=Offer.Status.SENT).count(),
        "completed_jobs": done.count(),
        "total_revenue": total_revenue or 0,
        "completed_contracts": offers.filter(status=Offer.Status.ACCEPTED).count(),
        "proposals_sent": offers.count(),
        "rating": workshop.rating,
        "review_count": workshop.review_count,
    }


def set_verification(workshop_id: int, is_verified=None, is_active=None) -> Workshop:
    try:
        workshop = Workshop.objects.get(pk=workshop_id)
    except Workshop.DoesNotExist:
        raise NotFoundError("Workshop not found")

    update_fields = []
    if is_verified is not None:
        workshop.is_verified = is_verified
        update_fields.append("is_verified")
    if is_active is not None:
        workshop.is_active = is_active
        update_fields.append("is_active")
    if update_fields:
        workshop.save(update_fields=update_fields + ["updated_at"])
    return workshop
