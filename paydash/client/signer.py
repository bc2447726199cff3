"""HMAC-SHA256 request signing.

The canonical string is built from ``key=value`` pairs in the order they
were supplied, joined with ``&``. Keys are never sorted: the exchange
rebuilds the same string from the query as sent and compares digests, so
reordering parameters changes the signature.
"""

import hashlib
import hmac
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any
from urllib.parse import quote

from paydash.exceptions import ConfigurationError

Params = Mapping[str, Any] | Iterable[tuple[str, Any]]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _pairs(params: Params) -> list[tuple[str, Any]]:
    if isinstance(params, Mapping):
        return list(params.items())
    return list(params)


class RequestSigner:
    """Deterministic signer for exchange request parameters."""

    @staticmethod
    def canonical_query(params: Params) -> str:
        """Join parameters as ``k=v&k=v`` in insertion order, values percent-encoded."""
        return "&".join(
            f"{key}={quote(_format_value(value), safe='')}"
            for key, value in _pairs(params)
        )

    def sign(self, params: Params, secret: str | None) -> str:
        """Return the hex HMAC-SHA256 of the canonical query under ``secret``."""
        if not secret:
            raise ConfigurationError("signing secret is missing")
        query = self.canonical_query(params)
        return hmac.new(
            secret.encode("utf-8"),
            query.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
