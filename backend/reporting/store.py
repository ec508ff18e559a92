# reporting/store.py
"""
Journal store capability.

A JournalStore is the read path into posted journal data. Implementations
must:
- only return APPROVED lines from the fetch_lines_* methods
- yield fetch_lines_within results ordered by (date, entry_number, line_number)
- stream results (generators / chunked iterators) rather than build lists

Snapshot consistency across calls is the store's business, not the engine's.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Collection, Iterable, Iterator, List

from reporting.domain import (
    DateRange,
    EntryRecord,
    EntryStatus,
    LineRecord,
    line_sort_key,
)


class JournalStore(ABC):
    """Read-only access to posted journal entries of one company."""

    @abstractmethod
    def fetch_lines_before(
        self, account_ids: Collection[str], before: date
    ) -> Iterator[LineRecord]:
        """APPROVED lines on account_ids dated strictly before ``before``."""
        pass

    @abstractmethod
    def fetch_lines_within(
        self, account_ids: Collection[str], date_range: DateRange
    ) -> Iterator[LineRecord]:
        """APPROVED lines on account_ids dated inside date_range, in posting order."""
        pass

    @abstractmethod
    def fetch_entries(
        self, date_range: DateRange, min_status: EntryStatus = EntryStatus.PENDING
    ) -> Iterator[EntryRecord]:
        """Whole entries dated inside date_range with status >= min_status."""
        pass

    @abstractmethod
    def find_entries_by_reference(
        self, text: str, min_status: EntryStatus = EntryStatus.PENDING
    ) -> Iterator[EntryRecord]:
        """Entries whose reference contains ``text`` (coarse, case-insensitive)."""
        pass


class InMemoryJournalStore(JournalStore):
    """
    JournalStore over a list of EntryRecords.

    Used by tests and by anything that already has the ledger in memory.
    """

    def __init__(self, entries: Iterable[EntryRecord] = ()):
        self._entries: List[EntryRecord] = list(entries)

    def _approved_lines(self, account_ids: Collection[str]) -> List[LineRecord]:
        wanted = set(account_ids)
        lines = [
            line
            for entry in self._entries
            if entry.status == EntryStatus.APPROVED
            for line in entry.to_line_records()
            if line.account_id in wanted
        ]
        lines.sort(key=line_sort_key)
        return lines

    def fetch_lines_before(self, account_ids, before):
        for line in self._approved_lines(account_ids):
            if line.date < before:
                yield line

    def fetch_lines_within(self, account_ids, date_range):
        for line in self._approved_lines(account_ids):
            if line.date in date_range:
                yield line

    def fetch_entries(self, date_range, min_status=EntryStatus.PENDING):
        matching = [
            entry
            for entry in self._entries
            if entry.date in date_range and entry.status.at_least(min_status)
        ]
        matching.sort(key=lambda entry: (entry.date, entry.entry_number))
        yield from matching

    def find_entries_by_reference(self, text, min_status=EntryStatus.PENDING):
        needle = text.lower()
        matching = [
            entry
            for entry in self._entries
            if needle in (entry.reference or "").lower()
            and entry.status.at_least(min_status)
        ]
        matching.sort(key=lambda entry: (entry.date, entry.entry_number))
        yield from matching
