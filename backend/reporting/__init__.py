# reporting/__init__.py
"""
Reporting app - Ledger aggregation and financial reports.

The engine (domain, aggregator, reports, checks, engine) is plain Python
and knows nothing about Django. adapters.py feeds it from the ORM;
views.py and the check_ledger_integrity command are the outer surfaces.
"""
