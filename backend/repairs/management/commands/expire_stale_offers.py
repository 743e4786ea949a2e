from django.core.management.base import BaseCommand

from services.repair_management import expire_stale_offers


class Command(BaseCommand):
    help = "Expire SENT offers on repair requests whose bidding window has closed."

    def handle(self, *args, **options):
        expired_count, request_count = expire_stale_offers()

        self.stdout.write(
            self.style.SUCCESS(
                f"Expired {expired_count} offer(s) across {request_count} request(s)."
            )
        )
