from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = "Create a platform administrator, or promote/reset an existing account."

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True, help="Admin login email.")
        parser.add_argument("--password", required=True, help="Admin password.")
        parser.add_argument("--first-name", default="Admin")
        parser.add_argument("--last-name", default="User")

    def handle(self, *args, **options):
        User = get_user_model()
        email = options["email"].strip().lower()
        if not email:
            raise CommandError("--email must not be empty")

        user, created = User.objects.get_or_create(
            username=email,
            defaults={
                "email": email,
                "first_name": options["first_name"],
                "last_name": options["last_name"],
            },
        )
        user.email = email
        user.role = User.ROLE_ADMIN
        user.is_staff = True
        user.set_password(options["password"])
        user.save()

        verb = "Created" if created else "Updated"
        self.stdout.write(self.style.SUCCESS(f"{verb} admin account {email}."))
