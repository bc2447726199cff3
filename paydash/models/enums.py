"""Enumerations for the transaction ledger."""

from enum import StrEnum


class TransactionKind(StrEnum):
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    PAYMENT = "Payment"


class CanonicalStatus(StrEnum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    FAILED = "Failed"
    REJECTED = "Rejected"
    EXPIRED = "Expired"
    UNKNOWN = "Unknown"


class Granularity(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class DashboardState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
