"""Tests for ledger aggregation."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from paydash.engines.aggregation import Aggregator, period_key
from paydash.engines.reconciliation import Ledger, Reconciler
from paydash.models.enums import CanonicalStatus, Granularity, TransactionKind


class TestPeriodKey:
    @pytest.mark.parametrize(
        "moment, granularity, expected",
        [
            (datetime(2025, 2, 9, 23, 59, tzinfo=UTC), Granularity.DAY, "2025-02-09"),
            (datetime(2024, 1, 1, tzinfo=UTC), Granularity.WEEK, "2024-W01"),
            (datetime(2023, 1, 1, tzinfo=UTC), Granularity.WEEK, "2022-W52"),
            (datetime(2024, 12, 30, tzinfo=UTC), Granularity.WEEK, "2025-W01"),
            (datetime(2025, 2, 28, tzinfo=UTC), Granularity.MONTH, "2025-02"),
        ],
    )
    def test_keys(self, moment, granularity, expected):
        assert period_key(moment, granularity) == expected


class TestVolumeByPeriod:
    def setup_method(self):
        self.aggregator = Aggregator()

    def test_two_days(self, make_record):
        ledger = Ledger.build([
            make_record("a", datetime(2025, 2, 1, 9, tzinfo=UTC), amount="10"),
            make_record("b", datetime(2025, 2, 2, 9, tzinfo=UTC), amount="20"),
        ])
        report = self.aggregator.volume_by_period(ledger, Granularity.DAY)

        assert [(b.period_key, b.total_volume, b.count) for b in report.buckets] == [
            ("2025-02-01", Decimal("10"), 1),
            ("2025-02-02", Decimal("20"), 1),
        ]
        assert report.total_volume == Decimal("30")

    def test_same_bucket_sums(self, make_record):
        ledger = Ledger.build([
            make_record("a", datetime(2025, 2, 3, tzinfo=UTC), amount="1.5"),
            make_record("b", datetime(2025, 2, 5, tzinfo=UTC), amount="2.25"),
            make_record("c", datetime(2025, 3, 1, tzinfo=UTC), amount="4"),
        ])
        report = self.aggregator.volume_by_period(ledger, Granularity.MONTH)

        assert [b.period_key for b in report.buckets] == ["2025-02", "2025-03"]
        assert report.buckets[0].total_volume == Decimal("3.75")
        assert report.buckets[0].count == 2

    def test_unsorted_input_is_chronological(self, make_record):
        records = [
            make_record("c", datetime(2025, 1, 20, tzinfo=UTC)),
            make_record("a", datetime(2024, 12, 30, tzinfo=UTC)),
            make_record("b", datetime(2025, 1, 6, tzinfo=UTC)),
        ]
        report = self.aggregator.volume_by_period(records, Granularity.WEEK)
        assert [b.period_key for b in report.buckets] == ["2025-W01", "2025-W02", "2025-W04"]

    def test_out_of_range_amounts_do_not_overflow(self, normalizer):
        raws = [
            {"id": f"d{i}", "coin": "USDT", "amount": "1e1000000", "status": 1,
             "insertTime": 1_738_400_000_000}
            for i in range(2)
        ]
        ledger = Reconciler(normalizer).reconcile(raws, [], [])
        report = self.aggregator.volume_by_period(ledger, Granularity.DAY)

        assert report.total_volume == Decimal("0")
        assert report.total_count == 2

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_counts_sum_to_ledger_size(self, make_record, granularity):
        start = datetime(2024, 12, 20, tzinfo=UTC)
        ledger = Ledger.build(
            make_record(f"r{i}", start + timedelta(days=3 * i)) for i in range(12)
        )
        report = self.aggregator.volume_by_period(ledger, granularity)
        assert report.total_count == len(ledger)

    def test_empty(self):
        report = self.aggregator.volume_by_period(Ledger(), Granularity.WEEK)
        assert report.buckets == []
        assert report.total_volume == Decimal("0")


class TestStatusDistribution:
    def setup_method(self):
        self.aggregator = Aggregator()

    def test_empty_ledger_lists_every_status_at_zero(self):
        distribution = self.aggregator.status_distribution(Ledger())

        assert distribution.total == 0
        assert {s.status for s in distribution.shares} == set(CanonicalStatus)
        assert all(s.percentage == Decimal("0") for s in distribution.shares)

    def test_thirds_round_half_up(self, make_record):
        moment = datetime(2025, 2, 1, tzinfo=UTC)
        ledger = Ledger.build([
            make_record("a", moment, status=CanonicalStatus.COMPLETED),
            make_record("b", moment, status=CanonicalStatus.COMPLETED),
            make_record("c", moment, status=CanonicalStatus.FAILED),
        ])
        distribution = self.aggregator.status_distribution(ledger)

        assert distribution.percentage_of(CanonicalStatus.COMPLETED) == Decimal("66.67")
        assert distribution.percentage_of(CanonicalStatus.FAILED) == Decimal("33.33")
        assert distribution.count_of(CanonicalStatus.PENDING) == 0
        assert sum(s.count for s in distribution.shares) == len(ledger)

    def test_eighth_rounds_up(self, make_record):
        moment = datetime(2025, 2, 1, tzinfo=UTC)
        records = [make_record("x", moment, status=CanonicalStatus.EXPIRED)]
        records += [make_record(f"c{i}", moment) for i in range(7)]
        distribution = self.aggregator.status_distribution(records)

        assert distribution.percentage_of(CanonicalStatus.EXPIRED) == Decimal("12.50")
        assert distribution.percentage_of(CanonicalStatus.COMPLETED) == Decimal("87.50")


class TestSummarize:
    def test_windows_and_counts(self, make_record):
        now = datetime(2025, 3, 1, 12, tzinfo=UTC)
        ledger = Ledger.build([
            make_record("recent", now - timedelta(hours=2), amount="5"),
            make_record("days", now - timedelta(days=3), amount="7"),
            make_record("old", now - timedelta(days=10), amount="100"),
            make_record("pending", now - timedelta(hours=1), amount="50",
                        status=CanonicalStatus.PENDING),
            make_record("wd", now - timedelta(hours=5), amount="3",
                        kind=TransactionKind.WITHDRAWAL),
            make_record("future", now + timedelta(hours=1), amount="1000"),
        ])
        summary = Aggregator().summarize(ledger, now)

        assert summary.total == 6
        assert summary.by_kind[TransactionKind.DEPOSIT] == 5
        assert summary.by_kind[TransactionKind.WITHDRAWAL] == 1
        assert summary.by_kind[TransactionKind.PAYMENT] == 0
        assert summary.completed == 5
        assert summary.completed_volume_24h == Decimal("8")
        assert summary.completed_volume_7d == Decimal("15")
