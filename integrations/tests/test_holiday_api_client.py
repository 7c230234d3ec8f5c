"""
Tests for HolidayAPIClient.

HTTP is mocked; these cover response parsing, caching and retry behaviour.
"""

from unittest.mock import MagicMock, patch

import requests

from django.core.cache import cache
from django.test import TestCase, override_settings

from integrations.services.holiday_api_client import HolidayAPIClient


def _response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        error = requests.exceptions.HTTPError(f"{status_code} error")
        error.response = response
        response.raise_for_status.side_effect = error
    else:
        response.raise_for_status.return_value = None
    return response


@override_settings(
    HOLIDAY_API_URL="https://holidays.test/api/v3/PublicHolidays",
    HOLIDAY_COUNTRY_CODE="CO",
)
class HolidayAPIClientTest(TestCase):
    def setUp(self):
        cache.clear()

    def tearDown(self):
        cache.clear()

    @patch("integrations.services.holiday_api_client.requests.get")
    def test_fetch_holidays_success(self, mock_get):
        mock_get.return_value = _response(
            [
                {"date": "2025-01-01", "localName": "Año Nuevo", "name": "New Year's Day"},
                {"date": "2025-07-20", "localName": "Día de la Independencia"},
                {"date": "2026-01-01", "localName": "Año Nuevo"},
            ]
        )

        holidays = HolidayAPIClient.fetch_holidays(2025, "co")

        self.assertEqual(
            holidays,
            [
                {"date": "2025-01-01", "name": "Año Nuevo"},
                {"date": "2025-07-20", "name": "Día de la Independencia"},
            ],
        )
        mock_get.assert_called_once_with(
            "https://holidays.test/api/v3/PublicHolidays/2025/CO",
            timeout=HolidayAPIClient.REQUEST_TIMEOUT,
        )

    @patch("integrations.services.holiday_api_client.requests.get")
    def test_response_is_cached(self, mock_get):
        mock_get.return_value = _response([{"date": "2025-12-25", "localName": "Navidad"}])

        HolidayAPIClient.fetch_holidays(2025)
        HolidayAPIClient.fetch_holidays(2025)

        self.assertEqual(mock_get.call_count, 1)

    @patch("integrations.services.holiday_api_client.time.sleep")
    @patch("integrations.services.holiday_api_client.requests.get")
    def test_retries_on_network_error(self, mock_get, mock_sleep):
        mock_get.side_effect = [
            requests.exceptions.ConnectionError("boom"),
            _response([{"date": "2025-05-01", "localName": "Día del Trabajo"}]),
        ]

        holidays = HolidayAPIClient.fetch_holidays(2025, use_cache=False)

        self.assertEqual(len(holidays), 1)
        self.assertEqual(mock_get.call_count, 2)
        mock_sleep.assert_called_once_with(1)

    @patch("integrations.services.holiday_api_client.time.sleep")
    @patch("integrations.services.holiday_api_client.requests.get")
    def test_client_error_is_not_retried(self, mock_get, mock_sleep):
        mock_get.return_value = _response({}, status_code=404)

        self.assertEqual(HolidayAPIClient.fetch_holidays(2025, use_cache=False), [])
        self.assertEqual(mock_get.call_count, 1)
        mock_sleep.assert_not_called()

    @patch("integrations.services.holiday_api_client.time.sleep")
    @patch("integrations.services.holiday_api_client.requests.get")
    def test_gives_up_after_max_retries(self, mock_get, mock_sleep):
        mock_get.side_effect = requests.exceptions.Timeout("slow")

        self.assertEqual(HolidayAPIClient.fetch_holidays(2025, use_cache=False), [])
        self.assertEqual(mock_get.call_count, HolidayAPIClient.MAX_RETRIES)

    def test_parse_ignores_malformed_payload(self):
        self.assertEqual(HolidayAPIClient._parse_items({"items": []}, 2025), [])
        self.assertEqual(HolidayAPIClient._parse_items(["x", {"name": "no date"}], 2025), [])
