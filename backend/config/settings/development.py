"""
Configuration de développement
"""
import os

os.environ.setdefault('SECRET_KEY', 'django-insecure-dev-only-change-me')
os.environ.setdefault('DEBUG', 'True')

from .base import *  # noqa: E402,F401,F403
from .logging import get_logging_config  # noqa: E402

ALLOWED_HOSTS = env.list('ALLOWED_HOSTS', default=['localhost', '127.0.0.1', '.localhost'])

CORS_ALLOW_ALL_ORIGINS = True

LOGGING = get_logging_config(DEBUG)
