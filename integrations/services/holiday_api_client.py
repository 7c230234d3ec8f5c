"""
Public holiday API client - focused solely on HTTP communication

This client is responsible for:
- Requesting the public holiday list for a (year, country) pair
- Parsing and filtering the response
- Caching responses
- Retry logic with exponential backoff

It does NOT write to the database (see HolidaySyncService).
"""

import logging
import time
from datetime import date

import requests

from django.conf import settings
from django.core.cache import cache

from core.logging_utils import err_tag

logger = logging.getLogger(__name__)


class HolidayAPIClient:
    """
    Client for a Nager.Date compatible public holiday API.

    GET {HOLIDAY_API_URL}/{year}/{country} returns a JSON list of
    {"date": "YYYY-MM-DD", "localName": ..., "name": ..., ...}.
    """

    CACHE_KEY_PREFIX = "public_holidays_"
    CACHE_TIMEOUT = 60 * 60 * 24 * 7  # 7 days

    MAX_RETRIES = 3
    RETRY_BACKOFF_BASE = 2  # 2^attempt seconds
    REQUEST_TIMEOUT = 10

    @classmethod
    def base_url(cls) -> str:
        return settings.HOLIDAY_API_URL.rstrip("/")

    @classmethod
    def fetch_holidays(cls, year=None, country=None, use_cache=True):
        """
        Fetch public holidays for a year.

        Args:
            year (int, optional): Defaults to the current year.
            country (str, optional): ISO country code, defaults to HOLIDAY_COUNTRY_CODE.
            use_cache (bool): Whether to use caching.

        Returns:
            list: [{"date": "YYYY-MM-DD", "name": str}], empty list on failure.
        """
        year = year or date.today().year
        country = (country or settings.HOLIDAY_COUNTRY_CODE).upper()

        cache_key = f"{cls.CACHE_KEY_PREFIX}{country}_{year}"
        if use_cache:
            cached = cache.get(cache_key)
            if cached:
                logger.debug(f"Using cached holiday data for {country} {year}")
                return cached

        url = f"{cls.base_url()}/{year}/{country}"
        last_exception = None

        for attempt in range(cls.MAX_RETRIES):
            try:
                logger.info(
                    f"Fetching public holidays for {country} {year} "
                    f"(attempt {attempt + 1}/{cls.MAX_RETRIES})"
                )
                response = requests.get(url, timeout=cls.REQUEST_TIMEOUT)
                response.raise_for_status()

                holidays = cls._parse_items(response.json(), year)
                logger.info(
                    f"Retrieved {len(holidays)} holidays",
                    extra={
                        "country": country,
                        "year": year,
                        "count": len(holidays),
                        "action": "holidays_fetched",
                    },
                )
                if use_cache:
                    cache.set(cache_key, holidays, cls.CACHE_TIMEOUT)
                return holidays

            except requests.exceptions.HTTPError as e:
                last_exception = e
                status_code = e.response.status_code if e.response is not None else None
                # 4xx other than 429 will not succeed on retry
                if status_code and 400 <= status_code < 500 and status_code != 429:
                    logger.error(
                        f"Client error from holiday API: {status_code}",
                        extra={"err": err_tag(e), "action": "holidays_client_error"},
                    )
                    return []
                logger.warning(
                    f"HTTP error on attempt {attempt + 1}/{cls.MAX_RETRIES}",
                    extra={"err": err_tag(e)},
                )

            except requests.exceptions.RequestException as e:
                last_exception = e
                logger.warning(
                    f"Network error on attempt {attempt + 1}/{cls.MAX_RETRIES}",
                    extra={"err": err_tag(e)},
                )

            except ValueError as e:
                # Body was not JSON
                last_exception = e
                logger.warning(
                    f"Invalid payload on attempt {attempt + 1}/{cls.MAX_RETRIES}",
                    extra={"err": err_tag(e)},
                )

            if attempt < cls.MAX_RETRIES - 1:
                time.sleep(cls.RETRY_BACKOFF_BASE**attempt)

        logger.error(
            f"Failed to fetch holidays after {cls.MAX_RETRIES} attempts",
            extra={"err": err_tag(last_exception)} if last_exception else {},
        )
        return []

    @classmethod
    def _parse_items(cls, raw_data, year):
        """Keep well-formed entries that belong to the requested year"""
        if not isinstance(raw_data, list):
            return []

        items = []
        for item in raw_data:
            if not isinstance(item, dict):
                continue
            day = item.get("date", "")
            if not day.startswith(str(year)):
                continue
            items.append(
                {"date": day, "name": item.get("localName") or item.get("name") or ""}
            )
        return items
