"""
WSGI config for habitWeb.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'habitWeb.settings')

application = get_wsgi_application()
