"""Reconciliation engine: merges deposits, withdrawals and payment requests.

Each pass normalizes the three source lists, concatenates them in the order
deposits, withdrawals, payment requests, and stable-sorts the result by
``occurred_at`` descending. Records sharing a timestamp therefore keep the
concatenation order. The finished ledger and its id index are published with
a single assignment, so readers see either the previous ledger or the new
one, never a partial build.
"""

import asyncio
import logging
from collections.abc import Awaitable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from paydash.client.exchange import ExchangeClient
from paydash.exceptions import GatewayError
from paydash.models.enums import TransactionKind
from paydash.models.exchange import TransactionFilter
from paydash.models.transaction import TransactionRecord
from paydash.normalization.transactions import TransactionNormalizer

logger = logging.getLogger(__name__)


async def run_concurrently(*awaitables: Awaitable[Any]) -> list[Any]:
    """Await all of ``awaitables`` in a task group and return their results in order.

    The first failure cancels the remaining tasks. The error raised is the
    first ``GatewayError`` among the failures, or the first failure if none is
    one, unwrapped from the task group.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(_as_coroutine(a)) for a in awaitables]
    except BaseExceptionGroup as failures:
        leaves = _leaf_exceptions(failures)
        gateway_errors = [exc for exc in leaves if isinstance(exc, GatewayError)]
        raise (gateway_errors or leaves)[0] from None
    return [task.result() for task in tasks]


async def _as_coroutine(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def _leaf_exceptions(group: BaseExceptionGroup) -> list[BaseException]:
    leaves: list[BaseException] = []
    for exc in group.exceptions:
        if isinstance(exc, BaseExceptionGroup):
            leaves.extend(_leaf_exceptions(exc))
        else:
            leaves.append(exc)
    return leaves


def _empty_index() -> Mapping[str, TransactionRecord]:
    return MappingProxyType({})


@dataclass(frozen=True)
class Ledger:
    """Time-ordered, immutable collection of transaction records."""

    records: tuple[TransactionRecord, ...] = ()
    index: Mapping[str, TransactionRecord] = field(default_factory=_empty_index)
    built_at: datetime | None = None

    @classmethod
    def build(cls, records: Iterable[TransactionRecord], built_at: datetime | None = None) -> "Ledger":
        ordered = tuple(sorted(records, key=lambda r: r.occurred_at, reverse=True))
        index: dict[str, TransactionRecord] = {}
        for record in ordered:
            if record.id in index:
                logger.warning(
                    "Duplicate transaction id %s (%s and %s); keeping the more recent",
                    record.id, index[record.id].kind, record.kind,
                )
                continue
            index[record.id] = record
        return cls(records=ordered, index=MappingProxyType(index), built_at=built_at)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def get(self, record_id: str) -> TransactionRecord | None:
        return self.index.get(record_id)

    def for_asset(self, asset: str) -> "Ledger":
        """Sub-ledger restricted to one asset, keeping ledger order."""
        wanted = asset.upper()
        return Ledger.build(
            (r for r in self.records if r.asset.upper() == wanted), built_at=self.built_at
        )

    def of_kind(self, kind: TransactionKind) -> list[TransactionRecord]:
        return [r for r in self.records if r.kind == kind]


def _as_rows(payload: Any) -> list[dict[str, Any]]:
    """Accept a bare list or an envelope with a ``data`` list."""
    if isinstance(payload, dict):
        payload = payload.get("data", [])
    if not isinstance(payload, list):
        return []
    return [row for row in payload if isinstance(row, dict)]


class Reconciler:
    """Owns the current ledger and rebuilds it in full on every pass."""

    def __init__(self, normalizer: TransactionNormalizer | None = None):
        self.normalizer = normalizer or TransactionNormalizer()
        self._ledger = Ledger()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def get(self, record_id: str) -> TransactionRecord | None:
        """O(1) lookup against the most recently published ledger."""
        return self._ledger.get(record_id)

    def reconcile(
        self,
        deposits: Any,
        withdrawals: Any,
        payment_requests: Any,
    ) -> Ledger:
        """Build and publish a new ledger from raw provider payloads."""
        records = [
            *self.normalizer.normalize_many(_as_rows(deposits), TransactionKind.DEPOSIT),
            *self.normalizer.normalize_many(_as_rows(withdrawals), TransactionKind.WITHDRAWAL),
            *self.normalizer.normalize_many(_as_rows(payment_requests), TransactionKind.PAYMENT),
        ]
        ledger = Ledger.build(records, built_at=datetime.now(UTC))
        self._ledger = ledger
        logger.info("Reconciled ledger with %d records", len(ledger))
        return ledger

    async def refresh(
        self, client: ExchangeClient, filters: TransactionFilter | None = None
    ) -> Ledger:
        """Fetch all three sources concurrently and reconcile.

        Any fetch error propagates and the previous ledger stays published;
        no partial ledger is ever built from a subset of sources.
        """
        return self.reconcile(*await self.fetch(client, filters))

    async def fetch(
        self, client: ExchangeClient, filters: TransactionFilter | None = None
    ) -> tuple[Any, Any, Any]:
        """Fetch raw deposits, withdrawals and payment requests concurrently."""
        deposits, withdrawals, payment_requests = await run_concurrently(
            client.get_deposits(filters),
            client.get_withdrawals(filters),
            client.get_payment_requests(filters),
        )
        return deposits, withdrawals, payment_requests
