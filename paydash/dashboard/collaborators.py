"""Interfaces for collaborators that live outside the ledger core."""

import logging
from typing import Protocol

from pydantic import SecretStr

from paydash.models.exchange import Credentials

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def get(self) -> Credentials | None: ...

    def set(self, key: str, secret: str) -> None: ...


class Notifier(Protocol):
    def notify(self, kind: str, message: str) -> None: ...


class InMemoryCredentialStore:
    """Holds credentials for the lifetime of the process only."""

    def __init__(self, credentials: Credentials | None = None):
        self._credentials = credentials

    def get(self) -> Credentials | None:
        return self._credentials

    def set(self, key: str, secret: str) -> None:
        self._credentials = Credentials(api_key=key, api_secret=SecretStr(secret))


class LoggingNotifier:
    """Routes user notifications to the log."""

    _LEVELS = {
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "success": logging.INFO,
        "info": logging.INFO,
    }

    def notify(self, kind: str, message: str) -> None:
        logger.log(self._LEVELS.get(kind, logging.INFO), "[%s] %s", kind, message)
