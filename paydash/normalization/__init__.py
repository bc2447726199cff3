"""Normalization layer for provider records."""

from paydash.normalization.balances import BalanceNormalizer
from paydash.normalization.statuses import canonical_status
from paydash.normalization.transactions import TransactionNormalizer

__all__ = ["BalanceNormalizer", "TransactionNormalizer", "canonical_status"]
