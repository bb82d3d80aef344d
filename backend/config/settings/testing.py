"""
Configuration des tests : SQLite, sans django-tenants

Les tests tournent dans un schéma unique ; le contexte comptable
vient alors de COMPTABILITE (voir services.contexte).
"""
import os

os.environ.setdefault('SECRET_KEY', 'tests-only-secret-key')

from .base import *  # noqa: E402,F401,F403
from .logging import get_logging_config  # noqa: E402

DEBUG = False

INSTALLED_APPS = [
    app for app in INSTALLED_APPS  # noqa: F405
    if app not in ('django_tenants', 'apps.tenants')
]

MIDDLEWARE = [
    m for m in MIDDLEWARE  # noqa: F405
    if not m.startswith('django_tenants')
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

DATABASE_ROUTERS = ()

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

COMPTABILITE = {
    'DEVISE_BASE': 'XAF',
    'TOLERANCE_EQUILIBRE': '0.01',
    'TAUX_PAR_DEFAUT': {'USD/CDF': '2000'},
}

os.environ.setdefault('LOG_FORMAT', 'console')
LOGGING = get_logging_config(False)
