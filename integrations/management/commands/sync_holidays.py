from django.core.management.base import BaseCommand
from django.utils import timezone

from integrations.services.holiday_sync_service import HolidaySyncService


class Command(BaseCommand):
    help = "Syncs public holidays from the holiday API to the database"

    def add_arguments(self, parser):
        parser.add_argument(
            "--year",
            type=int,
            help="Year to sync holidays for (defaults to current year)",
        )
        parser.add_argument(
            "--future",
            type=int,
            default=0,
            help="Number of following years to sync as well",
        )
        parser.add_argument(
            "--country",
            type=str,
            help="ISO country code (defaults to HOLIDAY_COUNTRY_CODE)",
        )

    def handle(self, *args, **options):
        year = options["year"] or timezone.now().year
        years = [year + offset for offset in range(options["future"] + 1)]

        total_created = 0
        total_updated = 0
        for target in years:
            created, updated = HolidaySyncService.sync_year(target, options["country"])
            self.stdout.write(f"Year {target}: Created {created}, Updated {updated}")
            total_created += created
            total_updated += updated

        self.stdout.write(
            self.style.SUCCESS(
                f"Successfully synced holidays: {total_created} created, {total_updated} updated"
            )
        )
