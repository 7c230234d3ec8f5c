from django.apps import AppConfig


class BillingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "billing"

    def ready(self):
        """Register the group calculation strategies"""
        from billing.services.factory import register_default_strategies

        register_default_strategies()
