# accounting/__init__.py
"""
Accounting app - Double-entry bookkeeping storage for Ledgerline.

This app provides:
- Account: Chart of Accounts with hierarchy
- JournalEntry: Double-entry bookkeeping entries
- JournalLine: Debit/credit lines

The reporting app reads these tables through its ORM adapters.
"""
