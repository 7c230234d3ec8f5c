"""
Django settings for testing with SQLite database
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-opsbilling-only-not-for-production-use")

# Import base settings
from .settings import *  # noqa

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]


# Disable migrations for faster tests
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "sqlite-test-cache",
    }
}

HOLIDAY_API_URL = "https://holidays.test/api/v3/PublicHolidays"
