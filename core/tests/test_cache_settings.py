# core/tests/test_cache_settings.py
from django.conf import settings

from opsbilling.redis_settings import get_cache_config_with_fallback


def test_redis_url_selects_django_redis():
    caches = get_cache_config_with_fallback(
        redis_url="redis://:s3cret@cache.internal:6380/2", use_locmem=False
    )

    default = caches["default"]
    assert default["BACKEND"] == "django_redis.cache.RedisCache"
    assert default["LOCATION"] == "redis://cache.internal:6380/2"
    assert default["OPTIONS"]["CLIENT_CLASS"] == "django_redis.client.DefaultClient"
    assert default["OPTIONS"]["CONNECTION_POOL_KWARGS"]["password"] == "s3cret"
    assert default["KEY_PREFIX"] == "opsbilling"


def test_no_redis_url_falls_back_to_locmem():
    caches = get_cache_config_with_fallback(redis_url="", use_locmem=False)
    assert caches["default"]["BACKEND"] == "django.core.cache.backends.locmem.LocMemCache"


def test_locmem_can_be_forced():
    caches = get_cache_config_with_fallback(redis_url="redis://localhost:6379/0", use_locmem=True)
    assert caches["default"]["BACKEND"] == "django.core.cache.backends.locmem.LocMemCache"


def test_tests_run_on_locmem():
    assert settings.CACHES["default"]["BACKEND"] == "django.core.cache.backends.locmem.LocMemCache"
