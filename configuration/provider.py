"""
Cached access to named configuration values.

Values are read from the Configuration table and kept in the Django cache
for CONFIG_CACHE_TTL seconds. Writes to Configuration invalidate the
cached entry through signals (see configuration.signals).
"""

import logging
from typing import Optional

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

WEEKLY_HOURS = "WEEKLY_HOURS"
WEEKLY_HOURS_SUNDAY = "WEEKLY_HOURS_SUNDAY"

DEFAULT_WEEKLY_HOURS = 44
DEFAULT_WEEKLY_HOURS_SUNDAY = 48

_MISSING = "__missing__"


class ConfigurationProvider:
    """Read-through cache over the Configuration model"""

    CACHE_KEY_PREFIX = "configuration_value_"

    def __init__(self, ttl: Optional[int] = None):
        self._ttl = ttl

    @property
    def ttl(self) -> int:
        if self._ttl is not None:
            return self._ttl
        return getattr(settings, "CONFIG_CACHE_TTL", 300)

    def _cache_key(self, name: str) -> str:
        return f"{self.CACHE_KEY_PREFIX}{name}"

    def get_value(self, name: str) -> Optional[str]:
        """Return the stored value for `name`, or None when not configured"""
        key = self._cache_key(name)
        cached = cache.get(key)
        if cached is not None:
            return None if cached == _MISSING else cached

        from .models import Configuration

        row = Configuration.objects.filter(name=name).values_list("value", flat=True).first()
        cache.set(key, _MISSING if row is None else row, self.ttl)

        if row is None:
            logger.debug(
                f"Configuration {name} not found",
                extra={"config_name": name, "action": "config_missing"},
            )
        return row

    def get_int(self, name: str, default: int) -> int:
        raw = self.get_value(name)
        if raw is None or str(raw).strip() == "":
            return default
        try:
            return int(str(raw).strip())
        except ValueError:
            logger.warning(
                f"Configuration {name} is not an integer, using default {default}",
                extra={
                    "config_name": name,
                    "raw_value": raw,
                    "default": default,
                    "action": "config_invalid_integer",
                },
            )
            return default

    def get_weekly_hours_cap(self, has_sunday: bool) -> int:
        """
        Legally weighted weekly hour cap.

        Weeks that contain a Sunday use WEEKLY_HOURS_SUNDAY (default 48),
        other weeks use WEEKLY_HOURS (default 44).
        """
        if has_sunday:
            return self.get_int(WEEKLY_HOURS_SUNDAY, DEFAULT_WEEKLY_HOURS_SUNDAY)
        return self.get_int(WEEKLY_HOURS, DEFAULT_WEEKLY_HOURS)

    def invalidate(self, name: Optional[str] = None) -> None:
        """Forget one cached value, or the known weekly-cap values when name is None"""
        names = [name] if name else [WEEKLY_HOURS, WEEKLY_HOURS_SUNDAY]
        cache.delete_many([self._cache_key(n) for n in names])


_global_provider = ConfigurationProvider()


def get_configuration_provider() -> ConfigurationProvider:
    """
    Get the global configuration provider instance.

    Returns:
        ConfigurationProvider: Global provider instance
    """
    return _global_provider
