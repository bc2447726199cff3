"""Exchange-facing models: credentials, balances, and request payloads."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, SecretStr

from paydash.exceptions import ValidationError


class Credentials(BaseModel):
    api_key: str = Field(repr=False)
    api_secret: SecretStr


class Balance(BaseModel):
    asset: str
    free: Decimal
    locked: Decimal
    total: Decimal

    @property
    def is_zero(self) -> bool:
        return self.free == 0 and self.locked == 0


class TransactionFilter(BaseModel):
    """Query filter for deposit and withdrawal history."""

    coin: str | None = None
    status: int | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    limit: int = 20

    def to_params(self) -> dict[str, object]:
        """Ordered query parameters: coin, status, startTime, endTime, limit."""
        if self.limit < 1:
            raise ValidationError("limit", "must be at least 1")
        if self.start_time and self.end_time and self.start_time > self.end_time:
            raise ValidationError("start_time", "must not be after end_time")

        params: dict[str, object] = {}
        if self.coin:
            params["coin"] = self.coin
        if self.status is not None:
            params["status"] = self.status
        if self.start_time:
            params["startTime"] = _epoch_ms(self.start_time)
        if self.end_time:
            params["endTime"] = _epoch_ms(self.end_time)
        params["limit"] = self.limit
        return params


class WithdrawalRequest(BaseModel):
    coin: str
    address: str
    amount: Decimal
    network: str

    def to_body(self) -> dict[str, str]:
        return {
            "coin": self.coin,
            "address": self.address,
            "amount": format(self.amount, "f"),
            "network": self.network,
        }


class PaymentRequestDraft(BaseModel):
    asset: str
    amount: Decimal
    customer: str | None = None
    description: str | None = None

    def to_body(self) -> dict[str, str]:
        body = {"asset": self.asset, "amount": format(self.amount, "f")}
        if self.customer:
            body["customer"] = self.customer
        if self.description:
            body["description"] = self.description
        return body


def _epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)
