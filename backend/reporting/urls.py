# reporting/urls.py
from django.urls import path

from reporting.views import (
    AdvancedReportView,
    AnalyticalLedgerView,
    CheckSearchView,
    IntegrityCheckView,
    LegalJournalView,
    TrialBalanceView,
)


urlpatterns = [
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("analytical-ledger/", AnalyticalLedgerView.as_view(), name="analytical-ledger"),
    path("legal-journal/", LegalJournalView.as_view(), name="legal-journal"),
    path("check-search/", CheckSearchView.as_view(), name="check-search"),
    path("advanced/", AdvancedReportView.as_view(), name="advanced-report"),
    path("integrity/", IntegrityCheckView.as_view(), name="integrity-check"),
]
