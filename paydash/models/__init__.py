"""Data models for the payment gateway dashboard core."""

from paydash.models.enums import CanonicalStatus, DashboardState, Granularity, TransactionKind
from paydash.models.exchange import (
    Balance,
    Credentials,
    PaymentRequestDraft,
    TransactionFilter,
    WithdrawalRequest,
)
from paydash.models.reports import (
    AggregationBucket,
    LedgerSummary,
    StatusDistribution,
    StatusShare,
    VolumeReport,
)
from paydash.models.transaction import TransactionRecord

__all__ = [
    "AggregationBucket",
    "Balance",
    "CanonicalStatus",
    "Credentials",
    "DashboardState",
    "Granularity",
    "LedgerSummary",
    "PaymentRequestDraft",
    "StatusDistribution",
    "StatusShare",
    "TransactionFilter",
    "TransactionKind",
    "TransactionRecord",
    "VolumeReport",
    "WithdrawalRequest",
]
