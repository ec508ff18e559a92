# accounts/permissions.py
from __future__ import annotations

from django.db import transaction

from accounts.models import AccessPermission, CompanyMembership, CompanyMembershipPermission
from accounts.permission_defaults import ROLE_DEFAULTS


@transaction.atomic
def grant_role_defaults(membership: CompanyMembership, overwrite: bool = False) -> int:
    """
    Grant default permissions for the membership.role.

    - Idempotent by default: only grants missing codes.
    - If overwrite=True: first removes existing permissions then grants defaults.
    Returns number of permissions newly granted.
    """
    default_codes = ROLE_DEFAULTS.get(membership.role, set())

    if overwrite:
        CompanyMembershipPermission.objects.filter(
            membership=membership,
            company=membership.company,
        ).delete()

    existing = set(AccessPermission.objects.filter(code__in=default_codes).values_list("code", flat=True))
    missing = [c for c in default_codes if c not in existing]
    if missing:
        AccessPermission.objects.bulk_create(
            [AccessPermission(code=c, name=c, module=c.split(".")[0]) for c in missing],
            ignore_conflicts=True,
        )

    perms = list(AccessPermission.objects.filter(code__in=default_codes))

    already = set(
        CompanyMembershipPermission.objects.filter(
            membership=membership,
            permission__in=perms,
        ).values_list("permission_id", flat=True)
    )

    to_create = [
        CompanyMembershipPermission(
            membership=membership,
            company=membership.company,
            permission=perm,
        )
        for perm in perms
        if perm.id not in already
    ]
    CompanyMembershipPermission.objects.bulk_create(to_create, ignore_conflicts=True)
    return len(to_create)
