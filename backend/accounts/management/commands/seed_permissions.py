# accounts/management/commands/seed_permissions.py

from django.core.management.base import BaseCommand

from accounts.models import AccessPermission, CompanyMembership, CompanyMembershipPermission
from accounts.permission_defaults import all_permission_codes
from accounts.permissions import grant_role_defaults


class Command(BaseCommand):
    help = "Seed default permissions to the database"

    def add_arguments(self, parser):
        parser.add_argument(
            "--grant-defaults",
            action="store_true",
            help="Also grant role defaults to memberships that have no permissions yet",
        )

    def handle(self, *args, **options):
        created = 0
        updated = 0

        for code in sorted(all_permission_codes()):
            _, was_created = AccessPermission.objects.update_or_create(
                code=code,
                defaults={
                    "name": code,
                    "module": code.split(".")[0],
                },
            )
            if was_created:
                created += 1
            else:
                updated += 1

        self.stdout.write(self.style.SUCCESS(f"Done! Created {created}, updated {updated}."))

        if options["grant_defaults"]:
            granted = 0
            for membership in CompanyMembership.objects.select_related("company"):
                if CompanyMembershipPermission.objects.filter(membership=membership).exists():
                    continue
                granted += grant_role_defaults(membership)
            self.stdout.write(self.style.SUCCESS(f"Granted {granted} default permission(s)."))
