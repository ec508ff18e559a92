# accounts/authz.py
"""
Authorization utilities.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- require: Check permissions and raise if not granted

Permissions are checked:
1. First by role (OWNER: implicit allow)
2. ADMIN/USER/VIEWER: explicit permissions only (defaults + manual)
"""

from dataclasses import dataclass
from typing import FrozenSet

from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import CompanyMembership, Company


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor (user + company).

    Attributes:
        user: The authenticated user
        company: The active company (tenant)
        membership: The user's membership in the company
        perms: Set of explicit permission codes the user has
    """
    user: object  # User model
    company: Company
    membership: CompanyMembership
    perms: FrozenSet[str]

    def has(self, code: str) -> bool:
        if not self.membership.is_active:
            return False
        if self.membership.role == CompanyMembership.Role.OWNER:
            return True
        return code in self.perms

    @property
    def is_owner(self) -> bool:
        return self.membership.role == CompanyMembership.Role.OWNER


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    Membership and permissions are loaded fresh on every request so that
    permission changes take effect immediately.

    Raises:
        NotAuthenticated: If user is not authenticated
        PermissionDenied: If user has no active company or membership
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    company = getattr(user, "active_company", None)

    if not company:
        raise PermissionDenied("No active company selected. Please select a company first.")

    try:
        membership = CompanyMembership.objects.select_related(
            "company"
        ).prefetch_related(
            "permissions"
        ).get(
            user=user,
            company=company,
            is_active=True,
        )
    except CompanyMembership.DoesNotExist:
        raise PermissionDenied("You are not an active member of the selected company.")

    perms = frozenset(
        membership.permissions.values_list("code", flat=True)
    )

    return ActorContext(
        user=user,
        company=company,
        membership=membership,
        perms=perms,
    )


def require(actor: ActorContext, code: str) -> None:
    """
    Require that the actor has a specific permission.

    Raises:
        PermissionDenied: If permission is not granted
    """
    if not actor.has(code):
        raise PermissionDenied(f"Permission denied: {code}")
