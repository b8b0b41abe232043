from django.core.management.base import BaseCommand
import logging

from services.matching import sweep_expired

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Expire ACTIVE ride requests whose time-to-live has passed."

    def handle(self, *args, **options):
        expired = sweep_expired()

        self.stdout.write(
            self.style.SUCCESS(f"Expired {expired} ride request(s).")
        )
        logger.info("expire_ride_requests command expired %d request(s)", expired)
