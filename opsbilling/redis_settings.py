"""
Cache configuration: Redis through django-redis when REDIS_URL is set,
LocMem otherwise (local development and tests)
"""

from urllib.parse import urlparse

from decouple import config

CACHE_KEY_PREFIX = "opsbilling"
CACHE_TIMEOUT = 300


def get_redis_cache_config(redis_url):
    """Single Redis instance cache configuration"""
    parsed = urlparse(redis_url)
    host = parsed.hostname or "localhost"
    port = parsed.port or 6379
    db = int(parsed.path.lstrip("/") or 0)

    cache_config = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": f"{parsed.scheme or 'redis'}://{host}:{port}/{db}",
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
                "CONNECTION_POOL_KWARGS": {
                    "max_connections": 20,
                    "retry_on_timeout": True,
                    "socket_connect_timeout": 5,
                    "socket_timeout": 5,
                },
            },
            "TIMEOUT": CACHE_TIMEOUT,
            "VERSION": 1,
            "KEY_PREFIX": CACHE_KEY_PREFIX,
        }
    }

    if parsed.password:
        cache_config["default"]["OPTIONS"]["CONNECTION_POOL_KWARGS"][
            "password"
        ] = parsed.password

    return cache_config


def get_locmem_cache_config(location="opsbilling-cache"):
    return {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": location,
            "TIMEOUT": CACHE_TIMEOUT,
            "OPTIONS": {
                "MAX_ENTRIES": 10000,
            },
        }
    }


def get_cache_config_with_fallback(redis_url=None, use_locmem=None):
    """
    Redis when a REDIS_URL is configured, LocMem when it is not or when
    USE_LOCMEM_CACHE is set
    """
    if redis_url is None:
        redis_url = config("REDIS_URL", default="")
    if use_locmem is None:
        use_locmem = config("USE_LOCMEM_CACHE", default=False, cast=bool)

    if use_locmem or not redis_url:
        return get_locmem_cache_config()
    return get_redis_cache_config(redis_url)
