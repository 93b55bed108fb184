"""WSGI config for the FAMS project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "fams.settings")

application = get_wsgi_application()
