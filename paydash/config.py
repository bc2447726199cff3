"""Environment-backed settings for the exchange client and dashboard.

Values resolve in order: explicit CLI option, ``PAYDASH_*`` environment
variable, ``.env`` file in the working directory, then the defaults below.
"""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from paydash.exceptions import ConfigurationError
from paydash.models.exchange import Credentials


class ExchangeSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PAYDASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = "http://localhost:3000/api/v1/binance"
    api_key: str | None = None
    api_secret: SecretStr | None = None
    timeout_seconds: float = 15.0
    default_limit: int = 20
    refresh_interval_seconds: float = 30.0
    log_level: str = "WARNING"

    def credentials(self) -> Credentials:
        """Build credentials, failing when either half is missing."""
        if not self.api_key:
            raise ConfigurationError("PAYDASH_API_KEY is not set")
        if self.api_secret is None or not self.api_secret.get_secret_value():
            raise ConfigurationError("PAYDASH_API_SECRET is not set")
        return Credentials(api_key=self.api_key, api_secret=self.api_secret)
