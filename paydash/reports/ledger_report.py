"""Text report generators for the ledger, balances, and statistics."""

from decimal import Decimal
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from paydash.engines.reconciliation import Ledger
from paydash.models.exchange import Balance
from paydash.models.reports import LedgerSummary, StatusDistribution, VolumeReport

TEMPLATE_DIR = Path(__file__).parent / "templates"


def format_amount(value: Decimal) -> str:
    """Plain notation, trailing zeros trimmed, at most 8 decimal places."""
    quantized = value.quantize(Decimal("0.00000001"))
    text = format(quantized, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def _environment() -> Environment:
    env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), keep_trailing_newline=True)
    env.filters["amount"] = format_amount
    return env


class LedgerReportGenerator:
    """Renders the reconciled ledger as a fixed-width table."""

    def __init__(self) -> None:
        self.env = _environment()

    def render(self, ledger: Ledger, limit: int | None = None, asset: str | None = None) -> str:
        records = list(ledger.records if limit is None else ledger.records[:limit])
        template = self.env.get_template("ledger.txt")
        return template.render(records=records, total=len(ledger), asset=asset)


class BalancesReportGenerator:
    def __init__(self) -> None:
        self.env = _environment()

    def render(self, balances: list[Balance]) -> str:
        return self.env.get_template("balances.txt").render(balances=balances)


class StatisticsReportGenerator:
    """Renders the headline summary, bucketed volume and status distribution."""

    def __init__(self) -> None:
        self.env = _environment()

    def render(
        self,
        summary: LedgerSummary,
        volume: VolumeReport,
        distribution: StatusDistribution,
        asset: str | None = None,
    ) -> str:
        template = self.env.get_template("statistics.txt")
        return template.render(
            summary=summary, volume=volume, distribution=distribution, asset=asset
        )
