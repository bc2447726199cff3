"""Authenticated async client for the exchange proxy API.

Every private call gets a fresh ``timestamp`` (epoch milliseconds) appended
to its parameters, is signed with :class:`RequestSigner`, and carries the
API key in the ``X-API-KEY`` header. Calls are attempted exactly once; retry
and backoff are left to the caller. ``create_withdrawal`` is not idempotent
and the exchange offers no idempotency key, so a caller must not resubmit
after an ambiguous failure such as a timeout.
"""

import asyncio
import json
import logging
import re
import time
from collections.abc import Callable
from typing import Any

import aiohttp
from yarl import URL

from paydash.client.signer import RequestSigner
from paydash.exceptions import (
    AuthError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    UnknownError,
    ValidationError,
)
from paydash.models.exchange import (
    Credentials,
    PaymentRequestDraft,
    TransactionFilter,
    WithdrawalRequest,
)

logger = logging.getLogger(__name__)

ACCOUNT_PATH = "/account"
ACCOUNT_STATUS_PATH = "/account/status"
DEPOSITS_PATH = "/deposits"
WITHDRAWALS_PATH = "/withdrawals"
PAYMENT_REQUESTS_PATH = "/payment-requests"

API_KEY_HEADER = "X-API-KEY"
USER_AGENT = "paydash/0.1"

NETWORK_ADDRESS_PATTERNS = {
    "ETH": re.compile(r"^0x[a-fA-F0-9]{40}$"),
    "BSC": re.compile(r"^0x[a-fA-F0-9]{40}$"),
    "BTC": re.compile(r"^(1|3|bc1)[a-zA-Z0-9]{25,42}$"),
    "TRX": re.compile(r"^T[a-zA-Z0-9]{33}$"),
}
MIN_GENERIC_ADDRESS_LENGTH = 11


def validate_withdrawal(request: WithdrawalRequest) -> None:
    """Reject malformed withdrawal input before anything is sent."""
    if not request.coin.strip():
        raise ValidationError("coin", "must not be empty")
    if not request.address.strip():
        raise ValidationError("address", "must not be empty")
    if request.amount <= 0:
        raise ValidationError("amount", f"must be positive, got {request.amount}")
    if not request.network.strip():
        raise ValidationError("network", "must not be empty")

    pattern = NETWORK_ADDRESS_PATTERNS.get(request.network.upper())
    if pattern is not None:
        valid = bool(pattern.match(request.address))
    else:
        valid = len(request.address) >= MIN_GENERIC_ADDRESS_LENGTH
    if not valid:
        raise ValidationError(
            "address", f"not a valid {request.network.upper()} address"
        )


def validate_payment_request(draft: PaymentRequestDraft) -> None:
    if not draft.asset.strip():
        raise ValidationError("asset", "must not be empty")
    if draft.amount <= 0:
        raise ValidationError("amount", f"must be positive, got {draft.amount}")


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _decode_body(raw: bytes, charset: str | None) -> str:
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


class ExchangeClient:
    """Signed HTTP client for balances, deposits, withdrawals and payment requests."""

    def __init__(
        self,
        credentials: Credentials,
        base_url: str,
        *,
        timeout: float = 15.0,
        session: aiohttp.ClientSession | None = None,
        signer: RequestSigner | None = None,
        clock: Callable[[], float] = time.time,
    ):
        if not credentials.api_key:
            raise ConfigurationError("API key is missing")
        self._credentials = credentials
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None
        self.signer = signer or RequestSigner()
        self._clock = clock

    async def __aenter__(self) -> "ExchangeClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    # --- Operations ---

    async def get_balances(self) -> Any:
        return await self._request("GET", ACCOUNT_PATH)

    async def get_account_status(self) -> Any:
        return await self._request("GET", ACCOUNT_STATUS_PATH)

    async def get_deposits(self, filters: TransactionFilter | None = None) -> Any:
        params = (filters or TransactionFilter()).to_params()
        return await self._request("GET", DEPOSITS_PATH, params=params)

    async def get_withdrawals(self, filters: TransactionFilter | None = None) -> Any:
        params = (filters or TransactionFilter()).to_params()
        return await self._request("GET", WITHDRAWALS_PATH, params=params)

    async def create_withdrawal(self, request: WithdrawalRequest) -> Any:
        """Submit a withdrawal. Each call is sent once and never deduplicated."""
        validate_withdrawal(request)
        logger.info(
            "Submitting withdrawal of %s %s on %s", request.amount, request.coin, request.network
        )
        return await self._request("POST", WITHDRAWALS_PATH, body=request.to_body())

    async def get_payment_requests(self, filters: TransactionFilter | None = None) -> Any:
        params = (filters or TransactionFilter()).to_params()
        return await self._request("GET", PAYMENT_REQUESTS_PATH, params=params)

    async def create_payment_request(self, draft: PaymentRequestDraft) -> Any:
        validate_payment_request(draft)
        return await self._request("POST", PAYMENT_REQUESTS_PATH, body=draft.to_body())

    # --- HTTP plumbing ---

    def _signed_query(self, pairs: list[tuple[str, Any]]) -> tuple[str, str]:
        """Return (query string sent on the wire, signature)."""
        secret = self._credentials.api_secret.get_secret_value()
        signature = self.signer.sign(pairs, secret)
        return f"{self.signer.canonical_query(pairs)}&signature={signature}", signature

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, str] | None = None,
    ) -> Any:
        timestamp = int(self._clock() * 1000)
        if body is not None:
            # Body fields are signed; only timestamp and signature ride in the query.
            signed_pairs = [*body.items(), ("timestamp", timestamp)]
            _, signature = self._signed_query(signed_pairs)
            query = f"timestamp={timestamp}&signature={signature}"
        else:
            signed_pairs = [*(params or {}).items(), ("timestamp", timestamp)]
            query, signature = self._signed_query(signed_pairs)

        url = URL(f"{self.base_url}{path}?{query}", encoded=True)
        headers = {
            API_KEY_HEADER: self._credentials.api_key,
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        logger.debug(
            "%s %s params=%s",
            method,
            path,
            {**dict(signed_pairs), "signature": "***REDACTED***"},
        )

        session = self._get_session()
        try:
            async with session.request(
                method, url, headers=headers, json=body, timeout=self._timeout
            ) as response:
                status = response.status
                text = _decode_body(await response.read(), response.charset)
                retry_after = response.headers.get("Retry-After")
        except asyncio.TimeoutError as exc:
            logger.warning("%s %s timed out after %.1fs", method, path, self._timeout.total)
            raise NetworkError(method, path, "request timed out") from exc
        except aiohttp.ClientError as exc:
            logger.warning("%s %s transport failure: %s", method, path, exc)
            raise NetworkError(method, path, str(exc) or type(exc).__name__) from exc

        if status in (401, 403):
            logger.error("%s %s rejected credentials (HTTP %d)", method, path, status)
            raise AuthError(status, text)
        if status == 429:
            logger.warning("%s %s rate limited (Retry-After=%s)", method, path, retry_after)
            raise RateLimitError(_parse_retry_after(retry_after), text)
        if not 200 <= status < 300:
            logger.error("%s %s failed with HTTP %d", method, path, status)
            raise UnknownError(status, text)

        if not text.strip():
            return {}
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise UnknownError(status, text) from exc
