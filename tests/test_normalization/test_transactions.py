"""Tests for transaction normalization."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from paydash.engines.aggregation import period_key
from paydash.models.enums import CanonicalStatus, Granularity, TransactionKind
from paydash.normalization.transactions import to_decimal


class TestDepositNormalization:
    def test_maps_fields(self, normalizer, raw_deposit):
        record = normalizer.normalize(raw_deposit, TransactionKind.DEPOSIT)

        assert record.id == "dep-001"
        assert record.kind == TransactionKind.DEPOSIT
        assert record.asset == "USDT"
        assert record.amount == Decimal("125.50")
        assert record.network == "BSC"
        assert record.tx_hash == "0xabc123"
        assert record.canonical_status == CanonicalStatus.COMPLETED
        assert record.occurred_at == datetime(2025, 2, 10, 8, 30, tzinfo=UTC)

    def test_raw_status_preserved(self, normalizer, raw_deposit):
        raw_deposit["status"] = "1"
        record = normalizer.normalize(raw_deposit, TransactionKind.DEPOSIT)

        assert record.raw_status == "1"
        assert record.canonical_status == CanonicalStatus.COMPLETED

    def test_missing_timestamp_falls_back_to_processing_time(
        self, normalizer, raw_deposit, processing_time
    ):
        del raw_deposit["insertTime"]
        record = normalizer.normalize(raw_deposit, TransactionKind.DEPOSIT)
        assert record.occurred_at == processing_time

    def test_malformed_amount_becomes_zero(self, normalizer, raw_deposit):
        raw_deposit["amount"] = "12,5 USDT"
        record = normalizer.normalize(raw_deposit, TransactionKind.DEPOSIT)
        assert record.amount == Decimal("0")

    def test_unknown_status_is_kept_not_dropped(self, normalizer, raw_deposit):
        raw_deposit["status"] = 99
        record = normalizer.normalize(raw_deposit, TransactionKind.DEPOSIT)

        assert record.canonical_status == CanonicalStatus.UNKNOWN
        assert record.raw_status == 99


class TestWithdrawalNormalization:
    def test_maps_fields(self, normalizer, raw_withdrawal):
        record = normalizer.normalize(raw_withdrawal, TransactionKind.WITHDRAWAL)

        assert record.kind == TransactionKind.WITHDRAWAL
        assert record.amount == Decimal("40")
        assert record.address == "TXYZabcdefghijklmnopqrstuvwxyz1234"
        assert record.canonical_status == CanonicalStatus.COMPLETED
        assert record.occurred_at == datetime(2025, 2, 11, 9, 0, tzinfo=UTC)

    def test_numeral_string_timestamp(self, normalizer, raw_withdrawal):
        raw_withdrawal["applyTime"] = str(raw_withdrawal["applyTime"])
        record = normalizer.normalize(raw_withdrawal, TransactionKind.WITHDRAWAL)
        assert record.occurred_at == datetime(2025, 2, 11, 9, 0, tzinfo=UTC)


class TestPaymentNormalization:
    def test_maps_fields(self, normalizer, raw_payment):
        record = normalizer.normalize(raw_payment, TransactionKind.PAYMENT)

        assert record.kind == TransactionKind.PAYMENT
        assert record.asset == "USDT"
        assert record.amount == Decimal("15")
        assert record.canonical_status == CanonicalStatus.COMPLETED
        assert record.raw_status == "Confirmed"
        assert record.occurred_at == datetime(2025, 2, 12, 10, 15, tzinfo=UTC)

    def test_unconsumed_fields_land_in_metadata(self, normalizer, raw_payment):
        record = normalizer.normalize(raw_payment, TransactionKind.PAYMENT)
        assert record.metadata == {"customer": "cust-42"}

    def test_create_time_fallback(self, normalizer, raw_payment):
        del raw_payment["createdAt"]
        raw_payment["createTime"] = "2025-02-13T00:00:00+00:00"
        record = normalizer.normalize(raw_payment, TransactionKind.PAYMENT)
        assert record.occurred_at == datetime(2025, 2, 13, tzinfo=UTC)

    def test_offset_timestamp_converted_to_utc(self, normalizer, raw_payment):
        raw_payment["createdAt"] = "2025-02-01T23:30:00-05:00"
        record = normalizer.normalize(raw_payment, TransactionKind.PAYMENT)

        assert record.occurred_at == datetime(2025, 2, 2, 4, 30, tzinfo=UTC)
        assert record.occurred_at.utcoffset() == timedelta(0)
        assert period_key(record.occurred_at, Granularity.DAY) == "2025-02-02"

    def test_expired(self, normalizer, raw_payment):
        raw_payment["status"] = "expired"
        record = normalizer.normalize(raw_payment, TransactionKind.PAYMENT)
        assert record.canonical_status == CanonicalStatus.EXPIRED


class TestNormalizeMany:
    def test_skips_non_dict_rows(self, normalizer, raw_deposit):
        records = normalizer.normalize_many(
            [raw_deposit, "garbage", None], TransactionKind.DEPOSIT
        )
        assert [r.id for r in records] == ["dep-001"]


class TestToDecimal:
    def test_values(self):
        assert to_decimal("1.25") == Decimal("1.25")
        assert to_decimal(3) == Decimal("3")
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("Infinity") == Decimal("0")

    def test_out_of_range_magnitude_becomes_zero(self):
        assert to_decimal("1e1000000") == Decimal("0")
        assert to_decimal("1e101") == Decimal("0")
        assert to_decimal("1e100") == Decimal("1e100")
