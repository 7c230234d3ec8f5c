"""
Holiday Synchronization Service - stores public holidays in the Holiday table
"""

import logging
from datetime import date

from django.conf import settings

from integrations.models import Holiday
from integrations.services.holiday_api_client import HolidayAPIClient

logger = logging.getLogger(__name__)


class HolidaySyncService:
    """Upserts the public holiday calendar fetched by HolidayAPIClient"""

    @classmethod
    def sync_year(cls, year=None, country=None):
        """
        Synchronize holidays for a given year.

        Returns:
            tuple: (created_count, updated_count)
        """
        year = year or date.today().year
        country = (country or settings.HOLIDAY_COUNTRY_CODE).upper()

        logger.info(f"Starting holiday synchronization for {country} {year}")
        items = HolidayAPIClient.fetch_holidays(year, country)

        created_count = 0
        updated_count = 0
        for item in items:
            try:
                day = date.fromisoformat(item["date"])
            except (KeyError, ValueError):
                logger.warning(
                    "Skipping holiday with invalid date",
                    extra={"item": item, "action": "holiday_invalid_date"},
                )
                continue

            _, created = Holiday.objects.update_or_create(
                date=day,
                defaults={
                    "name": item.get("name") or "Holiday",
                    "is_holiday": True,
                    "country": country,
                },
            )
            if created:
                created_count += 1
            else:
                updated_count += 1

        logger.info(
            f"Holiday sync completed for {country} {year}: "
            f"created={created_count}, updated={updated_count}"
        )
        return created_count, updated_count
