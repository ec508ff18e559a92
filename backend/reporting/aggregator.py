# reporting/aggregator.py
"""
Balance aggregation: the shared core of every report.

For each requested account over an inclusive date range:
- opening balance = signed sum of APPROVED lines dated before the start
- period debits / credits = sums of APPROVED lines inside the range
- closing balance = opening + signed period activity

Both passes are left folds over the store's line streams, so memory use is
bounded by the number of accounts, not the number of lines.
"""

import logging
from typing import Collection, Dict

from reporting.chart import ChartOfAccounts
from reporting.domain import AccountPeriodBalance, DateRange, signed_balance
from reporting.errors import UpstreamUnavailable
from reporting.store import JournalStore


logger = logging.getLogger(__name__)


class _Running:
    __slots__ = ("opening", "debits", "credits")

    def __init__(self):
        self.opening = 0
        self.debits = 0
        self.credits = 0


class BalanceAggregator:
    """
    Computes AccountPeriodBalance values from a JournalStore.

    Stateless apart from its two collaborators; safe to share between
    threads and to call repeatedly.
    """

    def __init__(self, chart: ChartOfAccounts, store: JournalStore):
        self.chart = chart
        self.store = store

    def compute_balances(
        self, account_ids: Collection[str], date_range: DateRange
    ) -> Dict[str, AccountPeriodBalance]:
        """
        Compute opening, period and closing figures for each account.

        Args:
            account_ids: Accounts to aggregate
            date_range: Inclusive range (already validated by DateRange)

        Returns:
            Mapping account_id -> AccountPeriodBalance, one per requested id

        Raises:
            UnknownAccount: An id is not in the chart (raised before any fetch)
            UpstreamUnavailable: The store failed
        """
        accounts = self.chart.get_many(account_ids)
        if not accounts:
            return {}

        running = {account_id: _Running() for account_id in accounts}

        for line in self.store.fetch_lines_before(list(accounts), date_range.start):
            acc = self._slot(running, line)
            side = accounts[line.account_id].normal_side
            acc.opening += signed_balance(side, line.debit, line.credit)

        for line in self.store.fetch_lines_within(list(accounts), date_range):
            acc = self._slot(running, line)
            acc.debits += line.debit
            acc.credits += line.credit

        return {
            account_id: AccountPeriodBalance(
                account_id=account_id,
                normal_side=accounts[account_id].normal_side,
                opening_balance=acc.opening,
                period_debits=acc.debits,
                period_credits=acc.credits,
            )
            for account_id, acc in running.items()
        }

    def compute_all(self, date_range: DateRange) -> Dict[str, AccountPeriodBalance]:
        """compute_balances() over every account in the chart."""
        account_ids = [account.id for account in self.chart.list_accounts()]
        return self.compute_balances(account_ids, date_range)

    @staticmethod
    def _slot(running: Dict[str, _Running], line) -> _Running:
        try:
            return running[line.account_id]
        except KeyError:
            logger.error(
                "Journal store returned a line for an account that was not requested",
                extra={"account_id": line.account_id, "entry_number": line.entry_number},
            )
            raise UpstreamUnavailable(
                "journal store",
                f"Journal store returned a line for unrequested account {line.account_id}.",
            ) from None
