"""Balance normalization for the account endpoint."""

from typing import Any

from paydash.models.exchange import Balance
from paydash.normalization.transactions import to_decimal


class BalanceNormalizer:
    """Converts the ``/account`` payload into Balance models."""

    def normalize(self, payload: Any) -> list[Balance]:
        """Accepts a bare list or an object with a ``balances`` list."""
        if isinstance(payload, dict):
            payload = payload.get("balances", [])
        if not isinstance(payload, list):
            return []

        balances: list[Balance] = []
        for entry in payload:
            if not isinstance(entry, dict) or not entry.get("asset"):
                continue
            free = to_decimal(entry.get("free"))
            locked = to_decimal(entry.get("locked"))
            # Provider total is passed through as-is, even when it disagrees.
            if entry.get("total") is not None:
                total = to_decimal(entry["total"])
            else:
                total = free + locked
            balances.append(Balance(asset=str(entry["asset"]), free=free, locked=locked, total=total))
        return balances

    @staticmethod
    def non_zero(balances: list[Balance]) -> list[Balance]:
        return [b for b in balances if not b.is_zero]
