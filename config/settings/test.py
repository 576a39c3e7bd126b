# config/settings/test.py
from .base import *  # noqa

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Fast hashing keeps the auth suite quick
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

TENANT_QUERY_PARAM_ENABLED = True

LOGGING["loggers"]["clinic_core"]["level"] = "WARNING"  # noqa: F405
