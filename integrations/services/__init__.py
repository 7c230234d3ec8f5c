from .holiday_api_client import HolidayAPIClient
from .holiday_sync_service import HolidaySyncService

__all__ = ["HolidayAPIClient", "HolidaySyncService"]
