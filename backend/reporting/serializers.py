# reporting/serializers.py
"""
Serializers for the reporting API.

Note: These serializers are used for:
1. Input validation of query parameters
2. Output formatting of engine reports

Reports are plain dataclasses from reporting.reports; the output
serializers only read attributes. Amounts leave the engine as integer minor
units and are formatted here, and only here, as decimal strings. The
number of decimal places comes from the serializer context
(``decimal_places``, default 2).
"""

from rest_framework import serializers

from reporting.engine import ReportKind
from reporting.money import DEFAULT_DECIMAL_PLACES, format_minor_units


# =============================================================================
# Fields
# =============================================================================

class MinorUnitsField(serializers.Field):
    """Read-only integer minor units rendered as a decimal string."""

    def __init__(self, **kwargs):
        kwargs["read_only"] = True
        super().__init__(**kwargs)

    def to_representation(self, value):
        places = self.context.get("decimal_places", DEFAULT_DECIMAL_PLACES)
        return format_minor_units(value, places)


class EnumValueField(serializers.Field):
    def __init__(self, **kwargs):
        kwargs["read_only"] = True
        super().__init__(**kwargs)

    def to_representation(self, value):
        return getattr(value, "value", value)


# =============================================================================
# Input Serializers
# =============================================================================

class DateRangeQuerySerializer(serializers.Serializer):
    """
    Optional start_date / end_date. Ordering is checked by the engine
    (DateRange), which raises InvalidRange.
    """
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


class AnalyticalLedgerQuerySerializer(DateRangeQuerySerializer):
    account_id = serializers.CharField(required=False, allow_blank=False)
    account_code = serializers.CharField(required=False, allow_blank=False)

    def validate(self, attrs):
        if not attrs.get("account_id") and not attrs.get("account_code"):
            raise serializers.ValidationError("account_id or account_code is required.")
        return attrs


class CheckSearchQuerySerializer(serializers.Serializer):
    # Blank values reach the engine, which rejects them with InvalidCheckNumber.
    check_number = serializers.CharField(required=False, allow_blank=True, default="", trim_whitespace=True)


class AdvancedReportQuerySerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[kind.value for kind in ReportKind])


# =============================================================================
# Shared Output Serializers
# =============================================================================

class AccountRefSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    code = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    category = serializers.CharField(read_only=True)
    normal_side = EnumValueField()
    is_active = serializers.BooleanField(read_only=True)


class IntegrityIssueSerializer(serializers.Serializer):
    message = serializers.CharField(read_only=True)
    entry_number = serializers.IntegerField(read_only=True, allow_null=True)
    debits = MinorUnitsField()
    credits = MinorUnitsField()
    difference = MinorUnitsField()


# =============================================================================
# Trial Balance
# =============================================================================

class TrialBalanceRowSerializer(serializers.Serializer):
    account_id = serializers.CharField(source="account.id", read_only=True)
    code = serializers.CharField(source="account.code", read_only=True)
    name = serializers.CharField(source="account.name", read_only=True)
    category = serializers.CharField(source="account.category", read_only=True)
    normal_side = EnumValueField(source="account.normal_side")
    is_active = serializers.BooleanField(source="account.is_active", read_only=True)
    depth = serializers.IntegerField(read_only=True)
    opening_balance = MinorUnitsField()
    opening_debit = MinorUnitsField(source="balance.opening_debit")
    opening_credit = MinorUnitsField(source="balance.opening_credit")
    period_debits = MinorUnitsField()
    period_credits = MinorUnitsField()
    closing_balance = MinorUnitsField()
    closing_debit = MinorUnitsField(source="balance.closing_debit")
    closing_credit = MinorUnitsField(source="balance.closing_credit")


class TrialBalanceTotalsSerializer(serializers.Serializer):
    opening_debit = MinorUnitsField()
    opening_credit = MinorUnitsField()
    period_debits = MinorUnitsField()
    period_credits = MinorUnitsField()
    closing_debit = MinorUnitsField()
    closing_credit = MinorUnitsField()
    difference = MinorUnitsField()


class TrialBalanceSerializer(serializers.Serializer):
    start_date = serializers.DateField(source="date_range.start", read_only=True)
    end_date = serializers.DateField(source="date_range.end", read_only=True)
    rows = TrialBalanceRowSerializer(many=True, read_only=True)
    totals = TrialBalanceTotalsSerializer(read_only=True)
    is_balanced = serializers.BooleanField(read_only=True)
    violations = IntegrityIssueSerializer(many=True, read_only=True)


# =============================================================================
# Analytical Ledger
# =============================================================================

class LedgerTransactionSerializer(serializers.Serializer):
    date = serializers.DateField(read_only=True)
    entry_number = serializers.IntegerField(read_only=True)
    line_number = serializers.IntegerField(read_only=True)
    description = serializers.CharField(read_only=True)
    reference = serializers.CharField(read_only=True)
    debit = MinorUnitsField()
    credit = MinorUnitsField()
    running_balance = MinorUnitsField()


class AnalyticalLedgerSerializer(serializers.Serializer):
    account = AccountRefSerializer(read_only=True)
    start_date = serializers.DateField(source="date_range.start", read_only=True)
    end_date = serializers.DateField(source="date_range.end", read_only=True)
    opening_balance = MinorUnitsField()
    transactions = LedgerTransactionSerializer(many=True, read_only=True)
    total_debits = MinorUnitsField()
    total_credits = MinorUnitsField()
    closing_balance = MinorUnitsField()
    expected_closing_balance = MinorUnitsField()
    is_reconciled = serializers.BooleanField(read_only=True)
    violations = IntegrityIssueSerializer(many=True, read_only=True)


# =============================================================================
# Legal Journal
# =============================================================================

class LegalJournalLineSerializer(serializers.Serializer):
    line_number = serializers.IntegerField(read_only=True)
    account_id = serializers.CharField(read_only=True)
    account_code = serializers.CharField(read_only=True, allow_null=True)
    account_name = serializers.CharField(read_only=True, allow_null=True)
    debit = MinorUnitsField()
    credit = MinorUnitsField()
    description = serializers.CharField(read_only=True)


class LegalJournalEntrySerializer(serializers.Serializer):
    entry_number = serializers.IntegerField(read_only=True)
    correlative_number = serializers.IntegerField(read_only=True, allow_null=True)
    date = serializers.DateField(read_only=True)
    description = serializers.CharField(read_only=True)
    reference = serializers.CharField(read_only=True)
    status = EnumValueField()
    created_by = serializers.CharField(read_only=True)
    approved_by = serializers.CharField(read_only=True)
    approved_at = serializers.CharField(read_only=True, allow_null=True)
    lines = LegalJournalLineSerializer(many=True, read_only=True)
    total_debits = MinorUnitsField()
    total_credits = MinorUnitsField()
    is_balanced = serializers.BooleanField(read_only=True)
    issues = serializers.ListField(child=serializers.CharField(), read_only=True)


class CorrelativeGapSerializer(serializers.Serializer):
    first = serializers.IntegerField(read_only=True)
    last = serializers.IntegerField(read_only=True)
    size = serializers.IntegerField(read_only=True)


class LegalJournalSerializer(serializers.Serializer):
    start_date = serializers.DateField(source="date_range.start", read_only=True)
    end_date = serializers.DateField(source="date_range.end", read_only=True)
    entries = LegalJournalEntrySerializer(many=True, read_only=True)
    total_entries = serializers.IntegerField(read_only=True)
    total_debits = MinorUnitsField()
    total_credits = MinorUnitsField()
    correlative_gaps = CorrelativeGapSerializer(many=True, read_only=True)
    missing_correlatives = serializers.IntegerField(read_only=True)
    violations = IntegrityIssueSerializer(many=True, read_only=True)


class IntegrityCheckSerializer(serializers.Serializer):
    start_date = serializers.DateField(source="date_range.start", read_only=True)
    end_date = serializers.DateField(source="date_range.end", read_only=True)
    is_clean = serializers.BooleanField(read_only=True)
    is_balanced = serializers.BooleanField(source="trial_balance.is_balanced", read_only=True)
    total_entries = serializers.IntegerField(source="journal.total_entries", read_only=True)
    correlative_gaps = CorrelativeGapSerializer(source="journal.correlative_gaps", many=True, read_only=True)
    missing_correlatives = serializers.IntegerField(source="journal.missing_correlatives", read_only=True)
    violations = IntegrityIssueSerializer(many=True, read_only=True)


# =============================================================================
# Check Search
# =============================================================================

class CheckReferenceSerializer(serializers.Serializer):
    check_number = serializers.CharField(read_only=True)
    source_kind = EnumValueField()
    date = serializers.DateField(read_only=True)
    amount = MinorUnitsField()
    description = serializers.CharField(read_only=True)
    source_id = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)


class CheckSearchSerializer(serializers.Serializer):
    check_number = serializers.CharField(read_only=True)
    results = CheckReferenceSerializer(many=True, read_only=True)
    count = serializers.SerializerMethodField()

    def get_count(self, obj) -> int:
        return len(obj.results)
