# tests/conftest.py
"""
Pytest fixtures for Ledgerline tests.

Two kinds of fixtures live here:
- ORM fixtures (company, users, memberships, accounts, post_entry) for
  adapter, view and command tests
- ``ledger``: an in-memory chart + journal + payroll register for engine
  tests that need no database
"""

import itertools
from datetime import date
from uuid import uuid4

import pytest
from django.contrib.auth import get_user_model

from accounts.authz import ActorContext
from accounts.models import Company, CompanyMembership
from accounting.models import Account, JournalEntry, JournalLine
from payroll.models import PayrollCheck
from reporting.chart import InMemoryChartOfAccounts
from reporting.checks import InMemoryPayrollSource
from reporting.domain import (
    AccountRecord,
    EntryLine,
    EntryRecord,
    EntryStatus,
    NormalSide,
    PayrollDisbursement,
)
from reporting.engine import ReportEngine
from reporting.store import InMemoryJournalStore


User = get_user_model()


# =============================================================================
# In-memory ledger
# =============================================================================

class LedgerBuilder:
    """
    Builds AccountRecords, EntryRecords and PayrollDisbursements for engine
    tests, then hands out an engine over them.

    Usage:
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 10), (cash, 10000, 0), (revenue, 0, 10000))
        report = ledger.engine().trial_balance(...)
    """

    def __init__(self):
        self.accounts = []
        self.entries = []
        self.disbursements = []
        self._numbers = itertools.count(1)

    def account(self, code, name=None, side=NormalSide.DEBIT, category="", parent=None, is_active=True):
        record = AccountRecord(
            id=f"acc-{code}",
            code=code,
            name=name or f"Account {code}",
            normal_side=side,
            is_active=is_active,
            category=category,
            parent_id=parent.id if parent else None,
        )
        self.accounts.append(record)
        return record

    def entry(
        self,
        day,
        *lines,
        status=EntryStatus.APPROVED,
        entry_number=None,
        correlative="auto",
        reference="",
        description="",
    ):
        """Add an entry; each line is (account, debit, credit)."""
        number = entry_number if entry_number is not None else next(self._numbers)
        record = EntryRecord(
            entry_number=number,
            date=day,
            status=status,
            lines=tuple(
                EntryLine(line_number=i, account_id=account.id, debit=debit, credit=credit)
                for i, (account, debit, credit) in enumerate(lines, start=1)
            ),
            correlative_number=number if correlative == "auto" else correlative,
            description=description,
            reference=reference,
        )
        self.entries.append(record)
        return record

    def check(self, check_number, day, amount, payee="", memo="", status="ISSUED"):
        record = PayrollDisbursement(
            check_number=check_number,
            check_date=day,
            amount=amount,
            payee=payee,
            memo=memo,
            status=status,
            source_id=f"chk-{check_number}",
        )
        self.disbursements.append(record)
        return record

    def engine(self) -> ReportEngine:
        return ReportEngine(
            chart=InMemoryChartOfAccounts(self.accounts),
            store=InMemoryJournalStore(self.entries),
            payroll=InMemoryPayrollSource(self.disbursements),
        )


@pytest.fixture
def ledger():
    return LedgerBuilder()


# =============================================================================
# Company & User Fixtures
# =============================================================================

@pytest.fixture
def company(db):
    """Create a test company."""
    return Company.objects.create(
        public_id=uuid4(),
        name="Test Company",
        slug="test-company",
        default_currency="USD",
        is_active=True,
    )


@pytest.fixture
def second_company(db):
    """Create a second test company for multi-tenant tests."""
    return Company.objects.create(
        public_id=uuid4(),
        name="Second Company",
        slug="second-company",
        default_currency="EUR",
        is_active=True,
    )


@pytest.fixture
def user(db, company):
    """Create a test user with owner membership."""
    user = User.objects.create_user(
        email="owner@test.com",
        password="testpass123",
        name="Test Owner",
    )
    user.active_company = company
    user.save()
    return user


@pytest.fixture
def viewer_user(db, company):
    """Create a viewer user."""
    user = User.objects.create_user(
        email="viewer@test.com",
        password="testpass123",
        name="Test Viewer",
    )
    user.active_company = company
    user.save()
    return user


@pytest.fixture
def outsider_user(db, company):
    """A user whose active company is set but who has no membership."""
    user = User.objects.create_user(
        email="outsider@test.com",
        password="testpass123",
        name="Outsider",
    )
    user.active_company = company
    user.save()
    return user


@pytest.fixture
def owner_membership(db, company, user):
    """Create owner membership."""
    return CompanyMembership.objects.create(
        company=company,
        user=user,
        role=CompanyMembership.Role.OWNER,
        is_active=True,
    )


@pytest.fixture
def viewer_membership(db, company, viewer_user):
    """Create viewer membership; its role defaults are granted on creation."""
    return CompanyMembership.objects.create(
        company=company,
        user=viewer_user,
        role=CompanyMembership.Role.VIEWER,
        is_active=True,
    )


@pytest.fixture
def actor_context(user, company, owner_membership):
    """Create an ActorContext for the owner user."""
    perms = frozenset(
        owner_membership.permissions.values_list("code", flat=True)
    )
    return ActorContext(
        user=user,
        company=company,
        membership=owner_membership,
        perms=perms,
    )


# =============================================================================
# Account Fixtures
# =============================================================================

@pytest.fixture
def cash_account(db, company):
    """Create a cash account."""
    return Account.objects.create(
        company=company,
        code="1000",
        name="Cash",
        account_type=Account.AccountType.ASSET,
        status=Account.Status.ACTIVE,
    )


@pytest.fixture
def accounts_payable(db, company):
    """Create an accounts payable account."""
    return Account.objects.create(
        company=company,
        code="2000",
        name="Accounts Payable",
        account_type=Account.AccountType.LIABILITY,
        status=Account.Status.ACTIVE,
    )


@pytest.fixture
def revenue_account(db, company):
    """Create a revenue account."""
    return Account.objects.create(
        company=company,
        code="4000",
        name="Sales Revenue",
        account_type=Account.AccountType.REVENUE,
        status=Account.Status.ACTIVE,
    )


@pytest.fixture
def expense_account(db, company):
    """Create an expense account."""
    return Account.objects.create(
        company=company,
        code="5000",
        name="Operating Expenses",
        account_type=Account.AccountType.EXPENSE,
        status=Account.Status.ACTIVE,
    )


# =============================================================================
# Journal Fixtures
# =============================================================================

@pytest.fixture
def post_entry(db, company, user):
    """
    Factory for journal entries with lines.

    post_entry(day, [(account, debit, credit), ...], status=..., ...)
    Entry numbers count up from 1; the correlative number follows the entry
    number unless given.
    """
    numbers = itertools.count(1)

    def _post(
        day,
        lines,
        status=JournalEntry.Status.APPROVED,
        entry_number=None,
        correlative="auto",
        reference="",
        description="",
        target_company=None,
    ):
        number = entry_number if entry_number is not None else next(numbers)
        owner = target_company or company
        entry = JournalEntry.objects.create(
            company=owner,
            entry_number=number,
            correlative_number=number if correlative == "auto" else correlative,
            date=day,
            description=description,
            reference=reference,
            status=status,
            created_by=user,
            approved_by=user if status == JournalEntry.Status.APPROVED else None,
        )
        for line_no, (account, debit, credit) in enumerate(lines, start=1):
            JournalLine.objects.create(
                entry=entry,
                company=owner,
                line_no=line_no,
                account=account,
                debit=debit,
                credit=credit,
            )
        return entry

    return _post


@pytest.fixture
def payroll_check(db, company):
    """Factory for payroll checks."""

    def _check(check_number, check_date=date(2024, 1, 15), amount=250000, **kwargs):
        kwargs.setdefault("payee", "Jane Employee")
        kwargs.setdefault("status", PayrollCheck.Status.ISSUED)
        return PayrollCheck.objects.create(
            company=company,
            check_number=check_number,
            check_date=check_date,
            amount=amount,
            **kwargs,
        )

    return _check


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Create a DRF API client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def authenticated_client(api_client, user, owner_membership):
    """Create an authenticated API client for the company owner."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def viewer_client(api_client, viewer_user, viewer_membership):
    """Create an authenticated API client for a viewer."""
    api_client.force_authenticate(user=viewer_user)
    return api_client
