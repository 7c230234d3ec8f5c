"""
Cache invalidation for named configuration values
"""

import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Configuration
from .provider import get_configuration_provider

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Configuration)
@receiver(post_delete, sender=Configuration)
def invalidate_configuration_cache(sender, instance, **kwargs):
    """Drop the cached value so the next read sees the stored one"""
    get_configuration_provider().invalidate(instance.name)
    logger.debug(
        f"Configuration cache invalidated for {instance.name}",
        extra={"config_name": instance.name, "action": "config_cache_invalidated"},
    )
