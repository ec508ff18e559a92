# accounts/permission_defaults.py

ROLE_DEFAULTS = {
    "OWNER": {
        "company.view",
        "accounts.view",
        "journal.view",
        "payroll.view",
        "reports.view",
        "reports.integrity",
    },
    "ADMIN": {
        "company.view",
        "accounts.view",
        "journal.view",
        "payroll.view",
        "reports.view",
        "reports.integrity",
    },
    "USER": {
        "accounts.view",
        "journal.view",
        "reports.view",
    },
    "VIEWER": {
        "reports.view",
    },
}


def all_permission_codes() -> set:
    codes = set()
    for role_codes in ROLE_DEFAULTS.values():
        codes |= role_codes
    return codes
