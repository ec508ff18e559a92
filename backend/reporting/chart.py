# reporting/chart.py
"""
Chart of accounts capability.

The engine never queries accounts on its own; it is handed a
ChartOfAccounts. InMemoryChartOfAccounts backs tests and scripts;
reporting.adapters.DjangoChartOfAccounts backs the API.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List

from reporting.domain import AccountRecord
from reporting.errors import UnknownAccount


class ChartOfAccounts(ABC):
    """
    Read-only registry of accounts for one company.

    Subclasses must implement:
    - list_accounts(): every account, ordered by code
    - get_account(account_id): one account, or raise UnknownAccount
    - get_by_code(code): one account, or raise UnknownAccount
    """

    @abstractmethod
    def list_accounts(self) -> List[AccountRecord]:
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> AccountRecord:
        pass

    @abstractmethod
    def get_by_code(self, code: str) -> AccountRecord:
        pass

    def get_many(self, account_ids: Iterable[str]) -> Dict[str, AccountRecord]:
        """Resolve several ids at once. Raises UnknownAccount on the first miss."""
        return {account_id: self.get_account(account_id) for account_id in account_ids}

    def depth(self, account_id: str) -> int:
        """Hierarchy level: 0 for a root account, 1 for its children, and so on."""
        level = 0
        seen = {account_id}
        parent_id = self.get_account(account_id).parent_id
        while parent_id is not None and parent_id not in seen:
            seen.add(parent_id)
            level += 1
            parent_id = self.get_account(parent_id).parent_id
        return level


class InMemoryChartOfAccounts(ChartOfAccounts):
    """ChartOfAccounts over a fixed list of AccountRecords."""

    def __init__(self, accounts: Iterable[AccountRecord]):
        self._by_id: Dict[str, AccountRecord] = {}
        self._by_code: Dict[str, AccountRecord] = {}
        for account in accounts:
            if account.code in self._by_code:
                raise ValueError(f"Duplicate account code {account.code}")
            self._by_id[account.id] = account
            self._by_code[account.code] = account

    def list_accounts(self) -> List[AccountRecord]:
        return sorted(self._by_id.values(), key=lambda account: account.code)

    def get_account(self, account_id: str) -> AccountRecord:
        try:
            return self._by_id[account_id]
        except KeyError:
            raise UnknownAccount(account_id) from None

    def get_by_code(self, code: str) -> AccountRecord:
        try:
            return self._by_code[code]
        except KeyError:
            raise UnknownAccount(code) from None
