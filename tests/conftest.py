"""Shared test fixtures for the PayDash ledger core."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from paydash.models.enums import CanonicalStatus, TransactionKind
from paydash.models.transaction import TransactionRecord
from paydash.normalization.transactions import TransactionNormalizer

PROCESSING_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


@pytest.fixture
def processing_time() -> datetime:
    return PROCESSING_TIME


@pytest.fixture
def normalizer() -> TransactionNormalizer:
    return TransactionNormalizer(clock=lambda: PROCESSING_TIME)


@pytest.fixture
def raw_deposit() -> dict:
    return {
        "id": "dep-001",
        "coin": "USDT",
        "amount": "125.50",
        "network": "BSC",
        "status": 1,
        "address": "0x1111111111111111111111111111111111111111",
        "txId": "0xabc123",
        "insertTime": epoch_ms(datetime(2025, 2, 10, 8, 30, tzinfo=UTC)),
    }


@pytest.fixture
def raw_withdrawal() -> dict:
    return {
        "id": "wd-001",
        "coin": "USDT",
        "amount": "40",
        "network": "TRX",
        "status": 6,
        "address": "TXYZabcdefghijklmnopqrstuvwxyz1234",
        "txId": "trx-hash-1",
        "applyTime": epoch_ms(datetime(2025, 2, 11, 9, 0, tzinfo=UTC)),
    }


@pytest.fixture
def raw_payment() -> dict:
    return {
        "id": "pay-001",
        "asset": "USDT",
        "amount": 15,
        "status": "Confirmed",
        "customer": "cust-42",
        "createdAt": "2025-02-12T10:15:00Z",
    }


@pytest.fixture
def make_record():
    """Factory for canonical records with sensible defaults."""

    def _make(
        record_id: str,
        occurred_at: datetime,
        amount: str = "10",
        kind: TransactionKind = TransactionKind.DEPOSIT,
        status: CanonicalStatus = CanonicalStatus.COMPLETED,
        asset: str = "USDT",
    ) -> TransactionRecord:
        return TransactionRecord(
            id=record_id,
            kind=kind,
            asset=asset,
            amount=Decimal(amount),
            canonical_status=status,
            raw_status=None,
            occurred_at=occurred_at,
        )

    return _make
