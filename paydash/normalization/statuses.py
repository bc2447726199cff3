"""Provider status codes mapped to canonical statuses, one table per kind.

Deposits and withdrawals report integer codes (sometimes as numeral
strings); payment requests report free-form strings. Anything not in a
table maps to ``CanonicalStatus.UNKNOWN``.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from paydash.models.enums import CanonicalStatus, TransactionKind

DEPOSIT_STATUS: dict[int, CanonicalStatus] = {
    0: CanonicalStatus.PENDING,
    1: CanonicalStatus.COMPLETED,
    2: CanonicalStatus.PROCESSING,
    3: CanonicalStatus.FAILED,
    4: CanonicalStatus.FAILED,
}

WITHDRAWAL_STATUS: dict[int, CanonicalStatus] = {
    0: CanonicalStatus.PENDING,
    1: CanonicalStatus.FAILED,
    2: CanonicalStatus.PENDING,
    3: CanonicalStatus.REJECTED,
    4: CanonicalStatus.PROCESSING,
    5: CanonicalStatus.FAILED,
    6: CanonicalStatus.COMPLETED,
}

PAYMENT_STATUS: dict[str, CanonicalStatus] = {
    "success": CanonicalStatus.COMPLETED,
    "completed": CanonicalStatus.COMPLETED,
    "confirmed": CanonicalStatus.COMPLETED,
    "pending": CanonicalStatus.PENDING,
    "processing": CanonicalStatus.PENDING,
    "failed": CanonicalStatus.FAILED,
    "rejected": CanonicalStatus.FAILED,
    "cancelled": CanonicalStatus.FAILED,
    "expired": CanonicalStatus.EXPIRED,
}

_NUMERIC_TABLES = {
    TransactionKind.DEPOSIT: DEPOSIT_STATUS,
    TransactionKind.WITHDRAWAL: WITHDRAWAL_STATUS,
}


def parse_status_code(raw: Any) -> int | None:
    """Parse an integer status code from an int or numeral string (``1``, ``"1"``, ``"1.0"``)."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        return None
    if not value.is_finite() or value != value.to_integral_value():
        return None
    return int(value)


def canonical_status(kind: TransactionKind, raw: Any) -> CanonicalStatus:
    """Map a provider status to its canonical value. Never raises."""
    if kind == TransactionKind.PAYMENT:
        if not isinstance(raw, str):
            return CanonicalStatus.UNKNOWN
        return PAYMENT_STATUS.get(raw.strip().lower(), CanonicalStatus.UNKNOWN)

    code = parse_status_code(raw)
    if code is None:
        return CanonicalStatus.UNKNOWN
    return _NUMERIC_TABLES[kind].get(code, CanonicalStatus.UNKNOWN)
