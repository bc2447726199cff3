"""Ledger engines: reconciliation and aggregation."""

from paydash.engines.aggregation import Aggregator, period_key
from paydash.engines.reconciliation import Ledger, Reconciler

__all__ = ["Aggregator", "Ledger", "Reconciler", "period_key"]
