"""Reviews: one per booking, written by the booking's own customer."""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count

from repairs.models import Booking, Review
from workshops.models import Workshop
from .exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


def create_review(
    booking_id: int,
    customer,
    rating: int,
    comment: str = "",
    workshop_id: Optional[int] = None,
) -> Review:
    """
    Attach a review to a booking.

    The booking status is not checked: any booking the customer owns can be
    reviewed once.

    Raises:
        NotFoundError: If the booking does not exist
        ForbiddenError: If the booking belongs to another customer
        InvalidInputError: On a rating outside 1-5 or a mismatching workshop
        ConflictError: If the booking already has a review
    """
    try:
        rating = int(rating)
    except (TypeError, ValueError):
        raise InvalidInputError("Rating must be between 1 and 5")
    if not 1 <= rating <= 5:
        raise InvalidInputError("Rating must be between 1 and 5")

    try:
        booking = Booking.objects.select_related("workshop").get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError("Booking not found")

    if booking.customer_id != customer.id:
        raise ForbiddenError("You can only review your own bookings")

    if workshop_id is not None and int(workshop_id) != booking.workshop_id:
        raise InvalidInputError("Workshop does not match the booking")

    if Review.objects.filter(booking=booking).exists():
        raise ConflictError("Review already exists for this booking")

    try:
        with transaction.atomic():
            review = Review.objects.create(
                booking=booking,
                customer=customer,
                workshop=booking.workshop,
                rating=rating,
                comment=comment or "",
            )
            refresh_workshop_rating(booking.workshop_id)
    except IntegrityError:
        logger.warning("Duplicate review blocked by constraint on booking %s", booking.id)
        raise ConflictError("Review already exists for this booking")

    logger.info("Review %s (%s/5) added to booking %s", review.id, rating, booking.id)
    return review


def refresh_workshop_rating(workshop_id: int) -> None:
    """Recompute a workshop's average rating and review count from published reviews."""
    stats = Review.objects.filter(workshop_id=workshop_id, is_published=True).aggregate(
        avg=Avg("rating"), count=Count("id")
    )
    average = Decimal(str(stats["avg"] or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    Workshop.objects.filter(pk=workshop_id).update(rating=average, review_count=stats["count"])


def get_workshop_reviews(workshop_id: int):
    if not Workshop.objects.filter(pk=workshop_id).exists():
        raise NotFoundError("Workshop not found")
    return Review.objects.filter(workshop_id=workshop_id, is_published=True).select_related("customer")


def get_booking_review(booking_id: int) -> Review:
    try:
        return Review.objects.select_related("customer", "workshop").get(booking_id=booking_id)
    except Review.DoesNotExist:
        raise NotFoundError("Review not found")
