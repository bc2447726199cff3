"""Custom exceptions for the payment gateway dashboard core."""


class GatewayError(Exception):
    """Base exception for exchange and ledger errors."""

    user_message = "Something went wrong while talking to the exchange."


class ConfigurationError(GatewayError):
    """Raised when credentials or signing material are missing."""

    user_message = "Exchange API credentials are not configured."

    def __init__(self, message: str):
        super().__init__(f"Configuration error: {message}")


class AuthError(GatewayError):
    """Raised when the exchange rejects the supplied credentials (401/403)."""

    user_message = "The exchange rejected the API credentials. Check your API key and secret."

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"Authentication failed (HTTP {status})")


class RateLimitError(GatewayError):
    """Raised when the exchange throttles the client (429)."""

    user_message = "The exchange is rate limiting requests. Please try again later."

    def __init__(self, retry_after: float | None = None, body: str = ""):
        self.retry_after = retry_after
        self.body = body
        hint = f", retry after {retry_after}s" if retry_after is not None else ""
        super().__init__(f"Rate limit exceeded{hint}")


class NetworkError(GatewayError):
    """Raised on transport failures and timeouts."""

    user_message = "Could not reach the exchange. Check your network connection."

    def __init__(self, method: str, path: str, message: str):
        self.method = method
        self.path = path
        super().__init__(f"{method} {path} failed: {message}")


class ValidationError(GatewayError):
    """Raised when caller input fails validation before a request is sent."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Validation error on '{field}': {message}")

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return f"Invalid {self.field}: {self.message}"


class UnknownError(GatewayError):
    """Raised for non-2xx responses outside the known taxonomy."""

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"Unexpected exchange response (HTTP {status}): {body[:200]}")

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return f"The exchange returned an unexpected response (HTTP {self.status})."
