# reporting/views.py
"""
Views for the reporting API.

Every endpoint:
- resolves the actor and requires ``reports.view`` in the active company
  (``reports.integrity`` for the integrity check)
- validates query parameters with a serializer
- builds a ReportRequest and hands it to ReportEngine.generate
- serializes the report with amounts as decimal strings

Engine errors are translated in one place, ReportView.handle_exception.
"""

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor, require
from reporting.engine import ReportKind, ReportRequest
from reporting.errors import (
    InvalidCheckNumber,
    InvalidRange,
    ReportingError,
    UnknownAccount,
    UpstreamUnavailable,
)
from reporting.serializers import (
    AdvancedReportQuerySerializer,
    AnalyticalLedgerQuerySerializer,
    AnalyticalLedgerSerializer,
    CheckSearchQuerySerializer,
    CheckSearchSerializer,
    DateRangeQuerySerializer,
    IntegrityCheckSerializer,
    LegalJournalSerializer,
    TrialBalanceSerializer,
)
from reporting.services import build_engine, check_integrity, resolve_date_range


logger = logging.getLogger(__name__)


ERROR_STATUS = {
    InvalidRange: status.HTTP_400_BAD_REQUEST,
    InvalidCheckNumber: status.HTTP_400_BAD_REQUEST,
    UnknownAccount: status.HTTP_404_NOT_FOUND,
    UpstreamUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ReportView(APIView):
    """
    Base class for report endpoints.

    Subclasses set ``query_serializer_class``, ``output_serializer_class``
    and implement ``build_request``.
    """
    permission_classes = [IsAuthenticated]
    permission_code = "reports.view"

    query_serializer_class = None
    output_serializer_class = None

    def build_request(self, params, engine) -> ReportRequest:
        raise NotImplementedError

    def render(self, actor, query_params):
        params = self.query_serializer_class(data=query_params)
        params.is_valid(raise_exception=True)

        engine = build_engine(actor.company)
        report_request = self.build_request(params.validated_data, engine)
        report = engine.generate(report_request)

        logger.info(
            "Report served",
            extra={
                "company_id": actor.company.id,
                "user_id": actor.user.id,
                "report": report_request.kind.value,
            },
        )
        context = {"decimal_places": actor.company.decimal_places}
        return self.output_serializer_class(report, context=context).data

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, self.permission_code)
        return Response(self.render(actor, request.query_params))

    def handle_exception(self, exc):
        if isinstance(exc, ReportingError):
            code = status.HTTP_500_INTERNAL_SERVER_ERROR
            for error_class, error_status in ERROR_STATUS.items():
                if isinstance(exc, error_class):
                    code = error_status
                    break
            if code >= 500:
                logger.error(
                    "Report request failed",
                    extra={"path": self.request.path, "error": str(exc)},
                )
            return Response({"detail": str(exc)}, status=code)
        return super().handle_exception(exc)


def _date_range(params):
    return resolve_date_range(params.get("start_date"), params.get("end_date"))


class TrialBalanceView(ReportView):
    """
    GET /api/reports/trial-balance/

    Query params:
    - start_date, end_date: inclusive ISO dates (default: last 30 days)
    """
    query_serializer_class = DateRangeQuerySerializer
    output_serializer_class = TrialBalanceSerializer

    def build_request(self, params, engine):
        return ReportRequest(kind=ReportKind.TRIAL_BALANCE, date_range=_date_range(params))


class AnalyticalLedgerView(ReportView):
    """
    GET /api/reports/analytical-ledger/

    Query params:
    - account_id (public id) or account_code
    - start_date, end_date: inclusive ISO dates (default: last 30 days)
    """
    query_serializer_class = AnalyticalLedgerQuerySerializer
    output_serializer_class = AnalyticalLedgerSerializer

    def build_request(self, params, engine):
        date_range = _date_range(params)
        account_id = params.get("account_id")
        if not account_id:
            account_id = engine.chart.get_by_code(params["account_code"]).id
        return ReportRequest(
            kind=ReportKind.ANALYTICAL_LEDGER,
            date_range=date_range,
            account_id=account_id,
        )


class LegalJournalView(ReportView):
    """
    GET /api/reports/legal-journal/

    Query params:
    - start_date, end_date: inclusive ISO dates (default: last 30 days)
    """
    query_serializer_class = DateRangeQuerySerializer
    output_serializer_class = LegalJournalSerializer

    def build_request(self, params, engine):
        return ReportRequest(kind=ReportKind.LEGAL_JOURNAL, date_range=_date_range(params))


class CheckSearchView(ReportView):
    """
    GET /api/reports/check-search/

    Query params:
    - check_number: required; matched against journal references and
      payroll checks
    """
    query_serializer_class = CheckSearchQuerySerializer
    output_serializer_class = CheckSearchSerializer

    def build_request(self, params, engine):
        return ReportRequest(kind=ReportKind.CHECK_SEARCH, check_number=params.get("check_number", ""))


class AdvancedReportView(ReportView):
    """
    GET /api/reports/advanced/?type=<kind>

    Single entry point dispatching on ``type`` to one of the report views
    above, with the same query parameters.
    """

    VIEWS = {
        ReportKind.TRIAL_BALANCE: TrialBalanceView,
        ReportKind.ANALYTICAL_LEDGER: AnalyticalLedgerView,
        ReportKind.LEGAL_JOURNAL: LegalJournalView,
        ReportKind.CHECK_SEARCH: CheckSearchView,
    }

    def render(self, actor, query_params):
        selector = AdvancedReportQuerySerializer(data=query_params)
        selector.is_valid(raise_exception=True)
        kind = ReportKind(selector.validated_data["type"])
        return self.VIEWS[kind]().render(actor, query_params)


class IntegrityCheckView(ReportView):
    """
    GET /api/reports/integrity/

    Runs the trial balance and the legal journal over the range and returns
    their integrity violations and correlative gaps. Requires
    ``reports.integrity``.

    Query params:
    - start_date, end_date: inclusive ISO dates (default: last 30 days)
    """
    permission_code = "reports.integrity"
    query_serializer_class = DateRangeQuerySerializer
    output_serializer_class = IntegrityCheckSerializer

    def render(self, actor, query_params):
        params = self.query_serializer_class(data=query_params)
        params.is_valid(raise_exception=True)

        result = check_integrity(build_engine(actor.company), _date_range(params.validated_data))
        if not result.is_clean:
            logger.warning(
                "Integrity check found violations",
                extra={
                    "company_id": actor.company.id,
                    "user_id": actor.user.id,
                    "violations": len(result.violations),
                },
            )
        context = {"decimal_places": actor.company.decimal_places}
        return self.output_serializer_class(result, context=context).data
