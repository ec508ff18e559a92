# payroll/__init__.py
"""
Payroll app - Payroll check register.

Only the check register lives here; the reporting app cross-references it
by check number.
"""
