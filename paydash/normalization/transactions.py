"""Normalize provider transaction shapes into canonical records."""

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from paydash.models.enums import CanonicalStatus, TransactionKind
from paydash.models.transaction import TransactionRecord
from paydash.normalization.statuses import canonical_status

logger = logging.getLogger(__name__)

# Field names per kind: (asset field, timestamp fields in priority order)
_ASSET_FIELD = {
    TransactionKind.DEPOSIT: "coin",
    TransactionKind.WITHDRAWAL: "coin",
    TransactionKind.PAYMENT: "asset",
}
_TIMESTAMP_FIELDS = {
    TransactionKind.DEPOSIT: ("insertTime",),
    TransactionKind.WITHDRAWAL: ("applyTime",),
    TransactionKind.PAYMENT: ("createdAt", "createTime"),
}
_CONSUMED_FIELDS = {
    "id", "coin", "asset", "amount", "network", "address", "txId", "status",
    "insertTime", "applyTime", "createdAt", "createTime",
}
# Amounts of 1e101 or more are treated as malformed so sums stay in range.
MAX_AMOUNT_EXPONENT = 100


def _utc_now() -> datetime:
    return datetime.now(UTC)


def to_decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        return Decimal("0")
    if not result.is_finite() or result.adjusted() > MAX_AMOUNT_EXPONENT:
        return Decimal("0")
    return result


def _to_datetime(value: Any) -> datetime | None:
    """Parse epoch milliseconds or an ISO 8601 string into an aware UTC datetime."""
    if value is None or isinstance(value, bool) or value == "":
        return None
    if isinstance(value, datetime):
        return value.astimezone(UTC) if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float, Decimal)):
        millis = value
    else:
        text = str(value).strip()
        try:
            millis = Decimal(text)
        except InvalidOperation:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
                return parsed.astimezone(UTC) if parsed.tzinfo else parsed.replace(tzinfo=UTC)
            except (OverflowError, ValueError):
                return None
    try:
        return datetime.fromtimestamp(float(millis) / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


class TransactionNormalizer:
    """Maps raw deposit, withdrawal and payment-request dicts to TransactionRecords.

    Normalization is total: unknown statuses become ``Unknown``, malformed
    amounts become zero, and a missing timestamp falls back to the
    processing time supplied by ``clock``.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._clock = clock

    def normalize(self, raw: dict[str, Any], kind: TransactionKind) -> TransactionRecord:
        raw_status = raw.get("status")
        status = canonical_status(kind, raw_status)
        if status == CanonicalStatus.UNKNOWN:
            logger.debug("Unrecognized %s status %r for id %s", kind, raw_status, raw.get("id"))

        occurred_at = None
        for field_name in _TIMESTAMP_FIELDS[kind]:
            occurred_at = _to_datetime(raw.get(field_name))
            if occurred_at is not None:
                break
        if occurred_at is None:
            occurred_at = self._clock()

        metadata = {k: v for k, v in raw.items() if k not in _CONSUMED_FIELDS}

        return TransactionRecord(
            id=str(raw.get("id", "")),
            kind=kind,
            asset=str(raw.get(_ASSET_FIELD[kind]) or ""),
            amount=to_decimal(raw.get("amount")),
            network=_optional_str(raw.get("network")),
            address=_optional_str(raw.get("address")),
            tx_hash=_optional_str(raw.get("txId")),
            canonical_status=status,
            raw_status=raw_status,
            occurred_at=occurred_at,
            metadata=metadata,
        )

    def normalize_many(
        self, raws: Iterable[dict[str, Any]], kind: TransactionKind
    ) -> list[TransactionRecord]:
        return [self.normalize(raw, kind) for raw in raws if isinstance(raw, dict)]
