from django.db import models


class Holiday(models.Model):
    """Public holiday used by the billing calendar policy"""

    date = models.DateField(unique=True)
    name = models.CharField(max_length=150)
    is_holiday = models.BooleanField(default=True)
    country = models.CharField(max_length=2, default="CO")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} - {self.date}"

    class Meta:
        verbose_name = "Holiday"
        verbose_name_plural = "Holidays"
        ordering = ["-date"]
