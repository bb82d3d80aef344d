"""
Configuration de production : SECRET_KEY et base de données obligatoires
"""
from .base import *  # noqa: F401,F403

DEBUG = False

SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True

DATABASES['default']['NAME'] = env('DB_NAME')
DATABASES['default']['PASSWORD'] = env('DB_PASSWORD')
