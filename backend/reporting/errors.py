# reporting/errors.py
"""
Error taxonomy for the reporting engine.

- InvalidRange, UnknownAccount, InvalidCheckNumber: request-level errors,
  raised before or instead of any report output. Never retried.
- DataIntegrityViolation: the ledger itself is wrong (an approved entry whose
  debits differ from its credits, a period that does not balance). Reports
  collect these instead of raising them so the imbalance stays inspectable.
- UpstreamUnavailable: a collaborator (journal store, chart of accounts,
  payroll) failed. The engine propagates it unchanged.
"""


class ReportingError(Exception):
    """Base class for every error raised by the reporting engine."""


class InvalidRange(ReportingError):
    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Invalid date range: start {start} is after end {end}.")


class UnknownAccount(ReportingError):
    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found in chart of accounts.")


class InvalidCheckNumber(ReportingError):
    def __init__(self, check_number):
        self.check_number = check_number
        super().__init__("A check number is required.")


class DataIntegrityViolation(ReportingError):
    """
    Raised on demand by ``report.raise_for_integrity()``.

    Reports carry their problems as IntegrityIssue values; this wraps them
    for callers (such as the integrity check command) that want to fail hard.
    """

    def __init__(self, issues):
        self.issues = tuple(issues)
        summary = "; ".join(issue.message for issue in self.issues)
        super().__init__(f"Ledger integrity violated: {summary}")


class UpstreamUnavailable(ReportingError):
    def __init__(self, collaborator, message=""):
        self.collaborator = collaborator
        super().__init__(message or f"{collaborator} is unavailable.")
