# tests/test_reports.py
"""
Tests for the report generators and ReportEngine.

Tests cover:
- Trial balance: example scenario, omission of idle accounts, totals,
  four-column split, violations for an unbalanced ledger
- Analytical ledger: running balance fold, reconciliation with the
  aggregator, ordering ties
- Legal journal: correlative order, PENDING included / DRAFT excluded,
  per-entry issues, gaps
- Cross-report consistency and determinism
- Drafts leave every total alone; approving them moves every total
- ReportEngine.generate dispatch
"""

from dataclasses import replace
from datetime import date

import pytest

from reporting.domain import DateRange, EntryStatus, NormalSide, SourceKind
from reporting.engine import CheckSearch, ReportKind, ReportRequest
from reporting.errors import DataIntegrityViolation, UnknownAccount
from reporting.reports import AnalyticalLedger, CorrelativeGap, LegalJournal, TrialBalance


JANUARY = DateRange(date(2024, 1, 1), date(2024, 1, 31))


@pytest.fixture
def books(ledger):
    """Cash / Payables / Revenue / Expenses with a small January."""
    assets = ledger.account("1", "Assets", category="ASSET")
    cash = ledger.account("1000", "Cash", category="ASSET", parent=assets)
    payables = ledger.account("2000", "Payables", side=NormalSide.CREDIT, category="LIABILITY")
    revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT, category="REVENUE")
    expenses = ledger.account("5000", "Expenses", category="EXPENSE")

    ledger.entry(date(2023, 12, 15), (cash, 5000, 0), (revenue, 0, 5000))
    ledger.entry(date(2024, 1, 10), (cash, 10000, 0), (revenue, 0, 10000), reference="INV-1")
    ledger.entry(date(2024, 1, 12), (expenses, 3000, 0), (payables, 0, 3000))
    ledger.entry(date(2024, 1, 20), (payables, 3000, 0), (cash, 0, 3000), reference="CHK 1001")
    ledger.entry(date(2024, 1, 25), (cash, 999, 0), (revenue, 0, 999), status=EntryStatus.DRAFT)
    return ledger


class TestTrialBalanceExampleScenario:
    def test_single_sale(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 10), (cash, 10000, 0), (revenue, 0, 10000))

        report = ledger.engine().trial_balance(JANUARY)

        cash_row = report.row_for(cash.id)
        revenue_row = report.row_for(revenue.id)
        assert cash_row.opening_balance == 0
        assert cash_row.period_debits == 10000
        assert cash_row.closing_balance == 10000
        assert cash_row.balance.closing_debit == 10000
        assert revenue_row.period_credits == 10000
        assert revenue_row.closing_balance == 10000
        assert revenue_row.balance.closing_credit == 10000
        assert report.is_balanced
        assert report.violations == ()


class TestTrialBalance:
    def test_idle_accounts_are_omitted(self, books):
        report = books.engine().trial_balance(JANUARY)

        codes = [row.code for row in report.rows]
        assert codes == ["1000", "2000", "4000", "5000"]

    def test_rows_carry_depth(self, books):
        report = books.engine().trial_balance(JANUARY)

        assert report.row_for("acc-1000").depth == 1
        assert report.row_for("acc-5000").depth == 0

    def test_totals(self, books):
        report = books.engine().trial_balance(JANUARY)
        totals = report.totals

        assert totals.period_debits == 10000 + 3000 + 3000
        assert totals.period_credits == totals.period_debits
        assert totals.difference == 0
        assert totals.opening_debit == totals.opening_credit == 5000
        assert totals.closing_debit == totals.closing_credit
        assert report.is_balanced

    def test_draft_entries_are_excluded(self, books):
        report = books.engine().trial_balance(JANUARY)

        # 5000 opening + 10000 - 3000; the 999 draft is not counted
        assert report.row_for("acc-1000").closing_balance == 12000

    def test_inactive_account_with_activity_is_included(self, ledger):
        cash = ledger.account("1000", "Cash")
        old = ledger.account("1900", "Old clearing", is_active=False)
        ledger.entry(date(2024, 1, 3), (cash, 100, 0), (old, 0, 100))

        report = ledger.engine().trial_balance(JANUARY)

        assert report.row_for(old.id) is not None
        assert report.is_balanced

    def test_unbalanced_ledger_is_reported_not_raised(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 10), (cash, 10000, 0), (revenue, 0, 9000))

        report = ledger.engine().trial_balance(JANUARY)

        assert not report.is_balanced
        assert report.has_violations
        assert report.totals.difference == 1000
        with pytest.raises(DataIntegrityViolation) as excinfo:
            report.raise_for_integrity()
        assert excinfo.value.issues == report.violations


class TestAnalyticalLedger:
    def test_example_scenario_matches_trial_balance(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 10), (cash, 10000, 0), (revenue, 0, 10000))
        engine = ledger.engine()

        report = engine.analytical_ledger(cash.id, JANUARY)

        assert report.opening_balance == 0
        assert len(report.transactions) == 1
        assert report.transactions[0].running_balance == 10000
        assert report.closing_balance == 10000
        assert report.closing_balance == engine.trial_balance(JANUARY).row_for(cash.id).closing_balance
        assert report.is_reconciled

    def test_running_balance_is_a_fold_from_opening(self, books):
        report = books.engine().analytical_ledger("acc-1000", JANUARY)

        assert report.opening_balance == 5000
        assert [tx.running_balance for tx in report.transactions] == [15000, 12000]
        assert report.total_debits == 10000
        assert report.total_credits == 3000
        assert report.closing_balance == 12000
        assert report.violations == ()

    def test_credit_normal_running_balance(self, books):
        report = books.engine().analytical_ledger("acc-2000", JANUARY)

        assert [tx.running_balance for tx in report.transactions] == [3000, 0]

    def test_same_day_lines_follow_entry_then_line_number(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        day = date(2024, 1, 5)
        ledger.entry(day, (revenue, 0, 300), (cash, 300, 0), entry_number=7)
        ledger.entry(day, (cash, 100, 0), (cash, 50, 0), (revenue, 0, 150), entry_number=3)

        report = ledger.engine().analytical_ledger(cash.id, JANUARY)

        keys = [(tx.entry_number, tx.line_number) for tx in report.transactions]
        assert keys == [(3, 1), (3, 2), (7, 2)]
        assert [tx.running_balance for tx in report.transactions] == [100, 150, 450]

    def test_account_without_activity_has_empty_ledger(self, books):
        report = books.engine().analytical_ledger("acc-1", JANUARY)

        assert report.transactions == ()
        assert report.opening_balance == report.closing_balance == 0

    def test_unknown_account(self, books):
        with pytest.raises(UnknownAccount):
            books.engine().analytical_ledger("acc-9999", JANUARY)


class TestLegalJournal:
    def test_pending_included_draft_excluded(self, books):
        report = books.engine().legal_journal(JANUARY)

        statuses = {entry.status for entry in report.entries}
        assert EntryStatus.DRAFT not in statuses
        assert report.total_entries == 3

    def test_pending_entries_appear(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 2), (cash, 100, 0), (revenue, 0, 100), status=EntryStatus.PENDING)

        report = ledger.engine().legal_journal(JANUARY)

        assert [entry.status for entry in report.entries] == [EntryStatus.PENDING]

    def test_entries_follow_correlative_order(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 2), (cash, 100, 0), (revenue, 0, 100), correlative=12)
        ledger.entry(date(2024, 1, 1), (cash, 200, 0), (revenue, 0, 200), correlative=13)
        ledger.entry(date(2024, 1, 3), (cash, 300, 0), (revenue, 0, 300), correlative=11)

        report = ledger.engine().legal_journal(JANUARY)

        assert [entry.correlative_number for entry in report.entries] == [11, 12, 13]
        assert report.correlative_gaps == ()

    def test_lines_carry_account_code_and_name(self, books):
        report = books.engine().legal_journal(JANUARY)

        first = report.entries[0]
        assert [(line.account_code, line.account_name) for line in first.lines] == [
            ("1000", "Cash"),
            ("4000", "Revenue"),
        ]

    def test_unbalanced_entry_is_flagged_and_kept(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 2), (cash, 100, 0), (revenue, 0, 100))
        bad = ledger.entry(date(2024, 1, 3), (cash, 100, 0), (revenue, 0, 90))
        ledger.entry(date(2024, 1, 4), (cash, 50, 0), (revenue, 0, 50))

        report = ledger.engine().legal_journal(JANUARY)

        assert report.total_entries == 3
        flagged = [entry for entry in report.entries if not entry.is_balanced]
        assert [entry.entry_number for entry in flagged] == [bad.entry_number]
        assert "not balanced" in flagged[0].issues[0]
        assert [issue.entry_number for issue in report.violations] == [bad.entry_number]
        assert report.violations[0].difference == 10

    def test_malformed_lines_are_flagged(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 2), (cash, 100, 100), (revenue, 0, 0))

        entry = ledger.engine().legal_journal(JANUARY).entries[0]

        assert not entry.is_balanced
        assert any("both a debit and a credit" in issue for issue in entry.issues)
        assert any("neither a debit nor a credit" in issue for issue in entry.issues)

    def test_violation_names_the_malformed_lines(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 2), (cash, 100, 100), (revenue, 0, 0))

        report = ledger.engine().legal_journal(JANUARY)

        assert len(report.violations) == 1
        message = report.violations[0].message
        assert "Line 1 has both a debit and a credit" in message
        assert "Line 2 has neither a debit nor a credit" in message
        assert "not balanced" not in message
        assert report.violations[0].difference == 0

    def test_unknown_account_on_line_is_flagged(self, ledger):
        cash = ledger.account("1000", "Cash")
        ghost = ledger.account("9999", "Ghost")
        ledger.entry(date(2024, 1, 2), (cash, 100, 0), (ghost, 0, 100))
        ledger.accounts.remove(ghost)

        entry = ledger.engine().legal_journal(JANUARY).entries[0]

        assert entry.lines[1].account_code is None
        assert any("unknown account" in issue for issue in entry.issues)

    def test_missing_and_duplicate_correlatives_and_gaps(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 2), (cash, 1, 0), (revenue, 0, 1), correlative=1)
        ledger.entry(date(2024, 1, 3), (cash, 1, 0), (revenue, 0, 1), correlative=4)
        ledger.entry(date(2024, 1, 4), (cash, 1, 0), (revenue, 0, 1), correlative=4)
        ledger.entry(date(2024, 1, 1), (cash, 1, 0), (revenue, 0, 1), correlative=None)

        report = ledger.engine().legal_journal(JANUARY)

        assert [entry.correlative_number for entry in report.entries] == [1, 4, 4, None]
        assert report.correlative_gaps == (CorrelativeGap(2, 3),)
        assert report.missing_correlatives == 2
        assert "Missing correlative number" in report.entries[-1].issues
        assert any("Duplicate correlative" in issue for issue in report.entries[1].issues)

    def test_far_off_correlative_gives_one_range(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 2), (cash, 1, 0), (revenue, 0, 1), correlative=1)
        ledger.entry(date(2024, 1, 3), (cash, 1, 0), (revenue, 0, 1), correlative=3)
        ledger.entry(date(2024, 1, 4), (cash, 1, 0), (revenue, 0, 1), correlative=5_000_001)

        report = ledger.engine().legal_journal(JANUARY)

        assert report.correlative_gaps == (CorrelativeGap(2, 2), CorrelativeGap(4, 5_000_000))
        assert report.missing_correlatives == 4_999_998
        assert [str(gap) for gap in report.correlative_gaps] == ["2", "4-5000000"]

    def test_report_totals(self, books):
        report = books.engine().legal_journal(JANUARY)

        assert report.total_debits == report.total_credits == 16000


class TestCrossReportConsistency:
    def test_every_trial_balance_row_matches_its_analytical_ledger(self, books):
        engine = books.engine()
        trial_balance = engine.trial_balance(JANUARY)

        for row in trial_balance.rows:
            ledger_report = engine.analytical_ledger(row.account.id, JANUARY)
            assert ledger_report.opening_balance == row.opening_balance
            assert ledger_report.closing_balance == row.closing_balance
            assert ledger_report.total_debits == row.period_debits
            assert ledger_report.total_credits == row.period_credits

    def test_approved_legal_journal_debits_match_trial_balance(self, books):
        engine = books.engine()
        journal = engine.legal_journal(JANUARY)
        approved_debits = sum(
            entry.total_debits
            for entry in journal.entries
            if entry.status == EntryStatus.APPROVED
        )

        assert approved_debits == engine.trial_balance(JANUARY).totals.period_debits


class TestDeterminism:
    def test_repeated_generation_is_identical(self, books):
        engine = books.engine()

        assert engine.trial_balance(JANUARY) == engine.trial_balance(JANUARY)
        assert engine.analytical_ledger("acc-1000", JANUARY) == engine.analytical_ledger("acc-1000", JANUARY)
        assert engine.legal_journal(JANUARY) == engine.legal_journal(JANUARY)

    def test_entry_insertion_order_does_not_matter(self, books):
        forward = books.engine().trial_balance(JANUARY)
        books.entries.reverse()
        backward = books.engine().trial_balance(JANUARY)

        assert forward == backward


class TestReportEngineGenerate:
    def test_dispatches_on_kind(self, books):
        engine = books.engine()

        assert isinstance(
            engine.generate(ReportRequest(kind=ReportKind.TRIAL_BALANCE, date_range=JANUARY)),
            TrialBalance,
        )
        assert isinstance(
            engine.generate(ReportRequest(kind=ReportKind.LEGAL_JOURNAL, date_range=JANUARY)),
            LegalJournal,
        )
        assert isinstance(
            engine.generate(ReportRequest(
                kind=ReportKind.ANALYTICAL_LEDGER,
                date_range=JANUARY,
                account_id="acc-1000",
            )),
            AnalyticalLedger,
        )

    def test_check_search_request(self, books):
        result = books.engine().generate(
            ReportRequest(kind=ReportKind.CHECK_SEARCH, check_number=" 1001 ")
        )

        assert isinstance(result, CheckSearch)
        assert result.check_number == "1001"
        assert [ref.source_kind for ref in result.results] == [SourceKind.JOURNAL]

    def test_kind_accepts_plain_strings(self, books):
        report = books.engine().generate(
            ReportRequest(kind="trial-balance", date_range=JANUARY)
        )
        assert isinstance(report, TrialBalance)

    def test_missing_range_is_rejected(self, books):
        with pytest.raises(ValueError):
            books.engine().generate(ReportRequest(kind=ReportKind.TRIAL_BALANCE))

    def test_missing_account_is_rejected(self, books):
        with pytest.raises(ValueError):
            books.engine().generate(
                ReportRequest(kind=ReportKind.ANALYTICAL_LEDGER, date_range=JANUARY)
            )


def _totals(engine, cash, revenue):
    trial_balance = engine.trial_balance(JANUARY)
    cash_ledger = engine.analytical_ledger(cash.id, JANUARY)
    balances = engine.aggregator.compute_all(JANUARY)
    return {
        "period_debits": trial_balance.totals.period_debits,
        "period_credits": trial_balance.totals.period_credits,
        "cash_closing": trial_balance.row_for(cash.id).closing_balance,
        "ledger_closing": cash_ledger.closing_balance,
        "ledger_transactions": len(cash_ledger.transactions),
        "revenue_closing": balances[revenue.id].closing_balance,
    }


class TestDraftExclusion:
    def test_draft_changes_nothing_and_approval_moves_every_total(self, ledger):
        cash = ledger.account("1000", "Cash")
        revenue = ledger.account("4000", "Revenue", side=NormalSide.CREDIT)
        ledger.entry(date(2024, 1, 5), (cash, 1000, 0), (revenue, 0, 1000))
        before = _totals(ledger.engine(), cash, revenue)

        draft = ledger.entry(date(2024, 1, 20), (cash, 250, 0), (revenue, 0, 250), status=EntryStatus.DRAFT)
        with_draft = _totals(ledger.engine(), cash, revenue)

        ledger.entries[ledger.entries.index(draft)] = replace(draft, status=EntryStatus.APPROVED)
        approved = _totals(ledger.engine(), cash, revenue)

        assert with_draft == before
        assert approved == {
            "period_debits": before["period_debits"] + 250,
            "period_credits": before["period_credits"] + 250,
            "cash_closing": before["cash_closing"] + 250,
            "ledger_closing": before["ledger_closing"] + 250,
            "ledger_transactions": before["ledger_transactions"] + 1,
            "revenue_closing": before["revenue_closing"] + 250,
        }
