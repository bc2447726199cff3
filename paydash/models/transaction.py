"""Canonical transaction record."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from paydash.models.enums import CanonicalStatus, TransactionKind


class TransactionRecord(BaseModel):
    id: str
    kind: TransactionKind
    asset: str
    amount: Decimal
    network: str | None = None
    address: str | None = None
    tx_hash: str | None = None
    canonical_status: CanonicalStatus
    raw_status: Any = None
    occurred_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)
