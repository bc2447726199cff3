"""Dashboard orchestration and collaborator interfaces."""

from paydash.dashboard.collaborators import (
    CredentialStore,
    InMemoryCredentialStore,
    LoggingNotifier,
    Notifier,
)
from paydash.dashboard.controller import DashboardContext, DashboardController

__all__ = [
    "CredentialStore",
    "DashboardContext",
    "DashboardController",
    "InMemoryCredentialStore",
    "LoggingNotifier",
    "Notifier",
]
