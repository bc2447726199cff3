"""Signed exchange API client."""

from paydash.client.exchange import ExchangeClient, validate_payment_request, validate_withdrawal
from paydash.client.signer import RequestSigner

__all__ = ["ExchangeClient", "RequestSigner", "validate_payment_request", "validate_withdrawal"]
