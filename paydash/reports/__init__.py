"""Report generation for the dashboard core."""

from paydash.reports.ledger_report import (
    BalancesReportGenerator,
    LedgerReportGenerator,
    StatisticsReportGenerator,
)

__all__ = [
    "BalancesReportGenerator",
    "LedgerReportGenerator",
    "StatisticsReportGenerator",
]
