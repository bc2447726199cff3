"""Typer CLI interface for PayDash."""

import asyncio
import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, NoReturn

import typer

from paydash.config import ExchangeSettings
from paydash.engines.reconciliation import Ledger
from paydash.exceptions import GatewayError, NetworkError, UnknownError, ValidationError
from paydash.models.enums import Granularity
from paydash.models.exchange import Balance

app = typer.Typer(
    name="paydash",
    help="PayDash: signed exchange client and transaction ledger for the payment gateway.",
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """PayDash: signed exchange client and transaction ledger for the payment gateway."""
    level = "DEBUG" if verbose else ExchangeSettings().log_level.upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class ConsoleNotifier:
    """Prints dashboard notifications to stderr."""

    def notify(self, kind: str, message: str) -> None:
        typer.echo(f"[{kind}] {message}", err=True)


def _load_settings(base_url: str | None) -> ExchangeSettings:
    settings = ExchangeSettings()
    if base_url:
        settings = settings.model_copy(update={"base_url": base_url})
    return settings


def _build_client(settings: ExchangeSettings):
    from paydash.client.exchange import ExchangeClient

    return ExchangeClient(
        settings.credentials(),
        settings.base_url,
        timeout=settings.timeout_seconds,
    )


def _fail(exc: GatewayError) -> NoReturn:
    typer.echo(f"Error: {exc.user_message}", err=True)
    raise typer.Exit(1)


def _parse_amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        typer.echo(f"Error: '{value}' is not a valid amount", err=True)
        raise typer.Exit(1)
    return amount


async def _fetch_balances(settings: ExchangeSettings) -> list[Balance]:
    from paydash.normalization.balances import BalanceNormalizer

    async with _build_client(settings) as client:
        payload = await client.get_balances()
    return BalanceNormalizer().normalize(payload)


async def _fetch_ledger(settings: ExchangeSettings) -> Ledger:
    from paydash.engines.reconciliation import Reconciler
    from paydash.models.exchange import TransactionFilter

    filters = TransactionFilter(limit=settings.default_limit)
    async with _build_client(settings) as client:
        return await Reconciler().refresh(client, filters)


async def _call(settings: ExchangeSettings, operation: str, payload: Any = None) -> Any:
    async with _build_client(settings) as client:
        method = getattr(client, operation)
        if payload is None:
            return await method()
        return await method(payload)


BASE_URL_OPTION = typer.Option(None, "--base-url", help="Override PAYDASH_BASE_URL")


@app.command()
def balances(
    show_all: bool = typer.Option(False, "--all", help="Include zero balances"),
    base_url: str | None = BASE_URL_OPTION,
) -> None:
    """Show account balances."""
    from paydash.normalization.balances import BalanceNormalizer
    from paydash.reports.ledger_report import BalancesReportGenerator

    settings = _load_settings(base_url)
    try:
        result = asyncio.run(_fetch_balances(settings))
    except GatewayError as exc:
        _fail(exc)
    if not show_all:
        result = BalanceNormalizer.non_zero(result)
    typer.echo(BalancesReportGenerator().render(result))


@app.command()
def ledger(
    limit: int | None = typer.Option(None, "--limit", "-n", help="Show at most N records"),
    asset: str | None = typer.Option(None, "--asset", help="Only show one asset"),
    base_url: str | None = BASE_URL_OPTION,
) -> None:
    """Fetch deposits, withdrawals and payment requests and print the merged ledger."""
    from paydash.reports.ledger_report import LedgerReportGenerator

    settings = _load_settings(base_url)
    try:
        result = asyncio.run(_fetch_ledger(settings))
    except GatewayError as exc:
        _fail(exc)
    if asset:
        result = result.for_asset(asset)
    typer.echo(LedgerReportGenerator().render(result, limit=limit, asset=asset))


@app.command()
def stats(
    granularity: Granularity = typer.Option(Granularity.DAY, "--granularity", "-g"),
    asset: str | None = typer.Option(
        None, "--asset", help="Restrict to one asset (volume is only meaningful per asset)"
    ),
    base_url: str | None = BASE_URL_OPTION,
) -> None:
    """Print bucketed volume and status distribution for the ledger."""
    from datetime import UTC, datetime

    from paydash.engines.aggregation import Aggregator
    from paydash.reports.ledger_report import StatisticsReportGenerator

    settings = _load_settings(base_url)
    try:
        result = asyncio.run(_fetch_ledger(settings))
    except GatewayError as exc:
        _fail(exc)
    if asset:
        result = result.for_asset(asset)
    elif len({r.asset.upper() for r in result}) > 1:
        typer.echo(
            "Warning: ledger mixes assets; volume totals add amounts across assets. "
            "Use --asset to restrict.",
            err=True,
        )

    aggregator = Aggregator()
    report = StatisticsReportGenerator().render(
        summary=aggregator.summarize(result, datetime.now(UTC)),
        volume=aggregator.volume_by_period(result, granularity),
        distribution=aggregator.status_distribution(result),
        asset=asset,
    )
    typer.echo(report)


@app.command(name="account-status")
def account_status(base_url: str | None = BASE_URL_OPTION) -> None:
    """Show the exchange account status."""
    settings = _load_settings(base_url)
    try:
        result = asyncio.run(_call(settings, "get_account_status"))
    except GatewayError as exc:
        _fail(exc)
    typer.echo(json.dumps(result, indent=2, default=str))


@app.command()
def withdraw(
    coin: str = typer.Argument(..., help="Coin to withdraw, e.g. USDT"),
    address: str = typer.Argument(..., help="Destination address"),
    amount: str = typer.Argument(..., help="Amount to withdraw"),
    network: str = typer.Option(..., "--network", help="Network, e.g. BSC, ETH, TRX"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    base_url: str | None = BASE_URL_OPTION,
) -> None:
    """Submit a withdrawal. Not idempotent: do not re-run after an ambiguous failure."""
    from paydash.client.exchange import validate_withdrawal
    from paydash.models.exchange import WithdrawalRequest

    request = WithdrawalRequest(
        coin=coin.upper(), address=address, amount=_parse_amount(amount), network=network.upper()
    )
    try:
        validate_withdrawal(request)
    except ValidationError as exc:
        _fail(exc)
    if not yes:
        typer.confirm(
            f"Withdraw {request.amount} {request.coin} to {request.address} on {request.network}?",
            abort=True,
        )

    settings = _load_settings(base_url)
    try:
        result = asyncio.run(_call(settings, "create_withdrawal", request))
    except (NetworkError, UnknownError) as exc:
        typer.echo(f"Error: {exc.user_message}", err=True)
        typer.echo(
            "Check the withdrawal history before retrying; the request may have been accepted.",
            err=True,
        )
        raise typer.Exit(1)
    except GatewayError as exc:
        _fail(exc)
    typer.echo(json.dumps(result, indent=2, default=str))


@app.command(name="request-payment")
def request_payment(
    asset: str = typer.Argument(..., help="Asset to request, e.g. USDT"),
    amount: str = typer.Argument(..., help="Amount to request"),
    customer: str | None = typer.Option(None, "--customer", help="Customer reference"),
    description: str | None = typer.Option(None, "--description"),
    base_url: str | None = BASE_URL_OPTION,
) -> None:
    """Create a payment request."""
    from paydash.models.exchange import PaymentRequestDraft

    draft = PaymentRequestDraft(
        asset=asset.upper(),
        amount=_parse_amount(amount),
        customer=customer,
        description=description,
    )
    settings = _load_settings(base_url)
    try:
        result = asyncio.run(_call(settings, "create_payment_request", draft))
    except GatewayError as exc:
        _fail(exc)
    typer.echo(json.dumps(result, indent=2, default=str))


@app.command()
def watch(
    interval: float | None = typer.Option(None, "--interval", help="Seconds between refreshes"),
    ticks: int = typer.Option(3, "--ticks", help="Number of refreshes to run"),
    base_url: str | None = BASE_URL_OPTION,
) -> None:
    """Refresh the dashboard on a fixed interval and print the final ledger."""
    from paydash.dashboard.controller import DashboardController
    from paydash.models.enums import DashboardState
    from paydash.models.exchange import TransactionFilter
    from paydash.reports.ledger_report import BalancesReportGenerator, LedgerReportGenerator

    settings = _load_settings(base_url)
    period = interval if interval is not None else settings.refresh_interval_seconds

    async def _watch():
        async with _build_client(settings) as client:
            controller = DashboardController(client, notifier=ConsoleNotifier())
            return await controller.run_periodic(
                period, ticks=ticks, filters=TransactionFilter(limit=settings.default_limit)
            )

    try:
        context = asyncio.run(_watch())
    except GatewayError as exc:
        _fail(exc)

    if context.state == DashboardState.ERROR:
        typer.echo(f"No data: {context.error_message}", err=True)
        raise typer.Exit(1)
    typer.echo(BalancesReportGenerator().render(list(context.balances)))
    typer.echo(LedgerReportGenerator().render(context.ledger))
