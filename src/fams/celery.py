"""Celery configuration for FAMS."""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "fams.settings")

app = Celery("fams")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
