"""Celery application for background email delivery and periodic sweeps."""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "market_backend.settings.settings")

app = Celery("market_backend")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
