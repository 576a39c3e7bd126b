# clinic_core/iam/management/commands/create_platform_account.py

import os

from django.core.management.base import BaseCommand, CommandError
from rest_framework.exceptions import APIException

from clinic_core.iam.services.sessions import SessionService


class Command(BaseCommand):
    help = "Create an account with no tenant (platform operator). Public sign-up cannot create these."

    def add_arguments(self, parser):
        parser.add_argument("email", type=str)
        parser.add_argument("--role", type=str, default="admin", help="Role id (default: admin).")
        parser.add_argument("--name", type=str, default="")
        parser.add_argument(
            "--password",
            type=str,
            default=None,
            help="Defaults to the PLATFORM_ACCOUNT_PASSWORD environment variable.",
        )

    def handle(self, *args, **opts):
        password = opts["password"] or os.getenv("PLATFORM_ACCOUNT_PASSWORD")
        if not password:
            raise CommandError("Pass --password or set PLATFORM_ACCOUNT_PASSWORD.")

        try:
            user = SessionService.create_platform_account(
                email=opts["email"],
                password=password,
                role_id=opts["role"],
                name=opts["name"],
            )
        except APIException as exc:
            raise CommandError(str(exc.detail))

        self.stdout.write(self.style.SUCCESS(f"Platform account created: {user.email} ({user.role_id})"))
