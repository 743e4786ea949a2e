"""Celery tasks for email delivery."""

import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


@shared_task(ignore_result=True)
def send_email_task(recipient: str, subject: str, body: str):
    """Deliver one email. Failures are logged, never retried."""
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [recipient])
        logger.info("Sent '%s' email to %s", subject, recipient)
    except Exception:
        logger.exception("Failed to send '%s' email to %s", subject, recipient)
