from django.db import models


class Configuration(models.Model):
    """Named configuration value (e.g. WEEKLY_HOURS, WEEKLY_HOURS_SUNDAY)"""

    name = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=255, blank=True, default="")
    description = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name}={self.value}"

    class Meta:
        verbose_name = "Configuration"
        verbose_name_plural = "Configurations"
        ordering = ["name"]
