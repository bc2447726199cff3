"""Ledger aggregation: bucketed volume, status distribution, headline summary.

Volume sums ``amount`` without regard to ``asset``. Callers must aggregate
a single-asset ledger (see ``Ledger.for_asset``); no currency conversion is
performed here.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from paydash.models.enums import CanonicalStatus, Granularity, TransactionKind
from paydash.models.reports import (
    AggregationBucket,
    LedgerSummary,
    StatusDistribution,
    StatusShare,
    VolumeReport,
)
from paydash.models.transaction import TransactionRecord

PERCENT_QUANTUM = Decimal("0.01")


def period_key(moment: datetime, granularity: Granularity) -> str:
    """Bucket key: ``YYYY-MM-DD``, ISO week ``YYYY-Www``, or ``YYYY-MM``."""
    if granularity == Granularity.DAY:
        return moment.strftime("%Y-%m-%d")
    if granularity == Granularity.WEEK:
        iso = moment.isocalendar()
        return f"{iso.year}-W{iso.week:02d}"
    return moment.strftime("%Y-%m")


class Aggregator:
    """Derives reports from a reconciled ledger. All methods are total."""

    def volume_by_period(
        self, records: Iterable[TransactionRecord], granularity: Granularity
    ) -> VolumeReport:
        """Sum amounts per period, buckets in chronological order (oldest period first)."""
        totals: dict[str, Decimal] = {}
        counts: dict[str, int] = {}
        for record in sorted(records, key=lambda r: r.occurred_at):
            key = period_key(record.occurred_at, granularity)
            totals[key] = totals.get(key, Decimal("0")) + record.amount
            counts[key] = counts.get(key, 0) + 1

        buckets = [
            AggregationBucket(period_key=key, total_volume=totals[key], count=counts[key])
            for key in totals
        ]
        return VolumeReport(granularity=granularity, buckets=buckets)

    def status_distribution(self, records: Iterable[TransactionRecord]) -> StatusDistribution:
        """Count and percentage per canonical status; every status is listed."""
        counts = {status: 0 for status in CanonicalStatus}
        for record in records:
            counts[record.canonical_status] += 1
        total = sum(counts.values())

        shares = []
        for status, count in counts.items():
            if total == 0:
                percentage = Decimal("0")
            else:
                percentage = (Decimal(count) * 100 / Decimal(total)).quantize(
                    PERCENT_QUANTUM, rounding=ROUND_HALF_UP
                )
            shares.append(StatusShare(status=status, count=count, percentage=percentage))
        return StatusDistribution(total=total, shares=shares)

    def summarize(self, records: Iterable[TransactionRecord], now: datetime) -> LedgerSummary:
        """Counts per kind plus completed volume over the last 24 hours and 7 days."""
        by_kind = {kind: 0 for kind in TransactionKind}
        total = 0
        completed = 0
        volume_24h = Decimal("0")
        volume_7d = Decimal("0")
        day_ago = now - timedelta(days=1)
        week_ago = now - timedelta(days=7)

        for record in records:
            total += 1
            by_kind[record.kind] += 1
            if record.canonical_status != CanonicalStatus.COMPLETED:
                continue
            completed += 1
            if week_ago < record.occurred_at <= now:
                volume_7d += record.amount
                if record.occurred_at > day_ago:
                    volume_24h += record.amount

        return LedgerSummary(
            as_of=now,
            total=total,
            by_kind=by_kind,
            completed=completed,
            completed_volume_24h=volume_24h,
            completed_volume_7d=volume_7d,
        )
