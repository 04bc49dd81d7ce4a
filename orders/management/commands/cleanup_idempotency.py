import logging

from django.core.management.base import BaseCommand
from django.utils import timezone
from orders.models import IdempotencyKey

logger = logging.getLogger("buildmart.orders")


class Command(BaseCommand):
    help = "Delete expired idempotency key records based on expires_at"

    def handle(self, *args, **options):
        deleted, _ = IdempotencyKey.objects.filter(expires_at__lt=timezone.now()).delete()
        logger.info("idempotency_cleanup", extra={"event": "idempotency_cleanup", "deleted": deleted})
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} expired idempotency keys."))
