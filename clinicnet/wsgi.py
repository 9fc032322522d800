"""
WSGI config for the clinic network booking engine.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clinicnet.settings.production')

application = get_wsgi_application()
