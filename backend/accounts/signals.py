# accounts/signals.py
from accounts.permissions import grant_role_defaults


def grant_defaults_on_join(sender, instance, created, raw=False, **kwargs):
    """New memberships start with the default permissions of their role."""
    if created and not raw:
        grant_role_defaults(instance)
