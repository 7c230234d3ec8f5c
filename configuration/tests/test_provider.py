"""
Tests for the cached configuration provider and its signal-based invalidation.
"""

from unittest.mock import patch

from django.core.cache import cache
from django.test import TestCase

from configuration.models import Configuration
from configuration.provider import (
    DEFAULT_WEEKLY_HOURS,
    DEFAULT_WEEKLY_HOURS_SUNDAY,
    WEEKLY_HOURS,
    WEEKLY_HOURS_SUNDAY,
    ConfigurationProvider,
)


class ConfigurationProviderTest(TestCase):
    def setUp(self):
        cache.clear()
        self.provider = ConfigurationProvider(ttl=300)

    def tearDown(self):
        cache.clear()

    def test_defaults_when_not_configured(self):
        self.assertEqual(self.provider.get_weekly_hours_cap(False), DEFAULT_WEEKLY_HOURS)
        self.assertEqual(
            self.provider.get_weekly_hours_cap(True), DEFAULT_WEEKLY_HOURS_SUNDAY
        )

    def test_reads_configured_values(self):
        Configuration.objects.create(name=WEEKLY_HOURS, value="42")
        Configuration.objects.create(name=WEEKLY_HOURS_SUNDAY, value="46")

        self.assertEqual(self.provider.get_weekly_hours_cap(False), 42)
        self.assertEqual(self.provider.get_weekly_hours_cap(True), 46)

    def test_invalid_integer_falls_back_to_default(self):
        Configuration.objects.create(name=WEEKLY_HOURS, value="forty")
        self.assertEqual(self.provider.get_weekly_hours_cap(False), 44)

    def test_value_is_cached_between_reads(self):
        Configuration.objects.create(name=WEEKLY_HOURS, value="40")
        self.assertEqual(self.provider.get_int(WEEKLY_HOURS, 44), 40)

        with patch("configuration.models.Configuration.objects") as mock_manager:
            self.assertEqual(self.provider.get_int(WEEKLY_HOURS, 44), 40)
            mock_manager.filter.assert_not_called()

    def test_missing_value_is_cached_too(self):
        self.assertIsNone(self.provider.get_value("UNKNOWN_NAME"))
        with patch("configuration.models.Configuration.objects") as mock_manager:
            self.assertIsNone(self.provider.get_value("UNKNOWN_NAME"))
            mock_manager.filter.assert_not_called()

    def test_save_invalidates_cached_value(self):
        config = Configuration.objects.create(name=WEEKLY_HOURS, value="40")
        self.assertEqual(self.provider.get_weekly_hours_cap(False), 40)

        config.value = "36"
        config.save()

        self.assertEqual(self.provider.get_weekly_hours_cap(False), 36)

    def test_create_after_missing_read_is_visible(self):
        self.assertEqual(self.provider.get_weekly_hours_cap(False), 44)
        Configuration.objects.create(name=WEEKLY_HOURS, value="45")
        self.assertEqual(self.provider.get_weekly_hours_cap(False), 45)

    def test_delete_invalidates_cached_value(self):
        config = Configuration.objects.create(name=WEEKLY_HOURS_SUNDAY, value="50")
        self.assertEqual(self.provider.get_weekly_hours_cap(True), 50)

        config.delete()

        self.assertEqual(self.provider.get_weekly_hours_cap(True), 48)
