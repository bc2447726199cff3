"""Report output models."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from paydash.models.enums import CanonicalStatus, Granularity, TransactionKind


class AggregationBucket(BaseModel):
    period_key: str
    total_volume: Decimal
    count: int


class StatusShare(BaseModel):
    status: CanonicalStatus
    count: int
    percentage: Decimal


class StatusDistribution(BaseModel):
    total: int
    shares: list[StatusShare]

    def percentage_of(self, status: CanonicalStatus) -> Decimal:
        for share in self.shares:
            if share.status == status:
                return share.percentage
        return Decimal("0")

    def count_of(self, status: CanonicalStatus) -> int:
        for share in self.shares:
            if share.status == status:
                return share.count
        return 0


class VolumeReport(BaseModel):
    granularity: Granularity
    buckets: list[AggregationBucket]

    @property
    def total_volume(self) -> Decimal:
        return sum((b.total_volume for b in self.buckets), Decimal("0"))

    @property
    def total_count(self) -> int:
        return sum(b.count for b in self.buckets)


class LedgerSummary(BaseModel):
    """Headline statistics for the dashboard overview."""

    as_of: datetime
    total: int
    by_kind: dict[TransactionKind, int]
    completed: int
    completed_volume_24h: Decimal
    completed_volume_7d: Decimal
