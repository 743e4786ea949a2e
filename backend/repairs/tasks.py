"""Celery tasks for repair-related background processing."""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def expire_stale_offers_task():
    """
    Periodic sweep (celery beat) that expires SENT offers on requests whose
    bidding window has passed.
    """
    from services.repair_management import expire_stale_offers

    expired, affected = expire_stale_offers()
    logger.info(f"Offer sweep finished: {expired} expired across {affected} request(s)")
    return expired
