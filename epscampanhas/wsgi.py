"""
WSGI config for the EPS Campanhas project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'epscampanhas.settings')

application = get_wsgi_application()
