"""Dashboard controller: owns refresh state as an explicit context value."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from paydash.client.exchange import ExchangeClient
from paydash.dashboard.collaborators import LoggingNotifier, Notifier
from paydash.engines.reconciliation import Ledger, Reconciler, run_concurrently
from paydash.exceptions import GatewayError
from paydash.models.enums import DashboardState
from paydash.models.exchange import Balance, TransactionFilter
from paydash.normalization.balances import BalanceNormalizer

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class DashboardContext:
    state: DashboardState = DashboardState.IDLE
    balances: tuple[Balance, ...] = ()
    ledger: Ledger = field(default_factory=Ledger)
    error_message: str | None = None
    refreshed_at: datetime | None = None


class DashboardController:
    """Coordinates one refresh cycle: balances plus the reconciled ledger.

    The context is replaced wholesale, never mutated. Overlapping refreshes
    are allowed; whichever completes last publishes its context.
    """

    def __init__(
        self,
        client: ExchangeClient,
        reconciler: Reconciler | None = None,
        notifier: Notifier | None = None,
        balance_normalizer: BalanceNormalizer | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.client = client
        self.reconciler = reconciler or Reconciler()
        self.notifier = notifier or LoggingNotifier()
        self.balance_normalizer = balance_normalizer or BalanceNormalizer()
        self._clock = clock
        self.context = DashboardContext()

    async def refresh(self, filters: TransactionFilter | None = None) -> DashboardContext:
        """Run one refresh. Gateway errors become an empty context in error state."""
        self.context = replace(self.context, state=DashboardState.LOADING)
        try:
            raw_balances, sources = await run_concurrently(
                self.client.get_balances(),
                self.reconciler.fetch(self.client, filters),
            )
        except GatewayError as exc:
            logger.warning("Dashboard refresh failed: %s", exc)
            context = DashboardContext(
                state=DashboardState.ERROR,
                error_message=exc.user_message,
                refreshed_at=self._clock(),
            )
            self.context = context
            self.notifier.notify("error", exc.user_message)
            return context

        ledger = self.reconciler.reconcile(*sources)
        balances = self.balance_normalizer.non_zero(self.balance_normalizer.normalize(raw_balances))
        context = DashboardContext(
            state=DashboardState.READY,
            balances=tuple(balances),
            ledger=ledger,
            refreshed_at=self._clock(),
        )
        self.context = context
        return context

    async def run_periodic(
        self,
        interval: float,
        ticks: int | None = None,
        filters: TransactionFilter | None = None,
    ) -> DashboardContext:
        """Start a refresh every ``interval`` seconds without waiting on the previous one.

        Stops after ``ticks`` refreshes (runs until cancelled when ``None``)
        and waits for outstanding refreshes before returning.
        """
        loop = asyncio.get_running_loop()
        pending: set[asyncio.Task] = set()
        started = 0
        next_tick = loop.time()
        try:
            while ticks is None or started < ticks:
                task = asyncio.create_task(self.refresh(filters))
                pending.add(task)
                task.add_done_callback(pending.discard)
                started += 1
                if ticks is not None and started >= ticks:
                    break
                next_tick += interval
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
            if pending:
                await asyncio.gather(*pending)
        except asyncio.CancelledError:
            for task in pending:
                task.cancel()
            raise
        return self.context
