"""
Error taxonomy for generation orchestration.

Errors below the router are translated into either a silent fallback
or a typed result; only terminal failures reach the caller.
"""

from typing import Any, Optional


class LegosphereError(Exception):
    """Base class for all orchestration errors."""


class ProviderError(LegosphereError):
    """Direct-provider failure. Fatal for the current call.

    Carries which path failed and, when the router fell back from the
    proxy, why the proxy attempt failed as well.
    """

    def __init__(
        self,
        message: str,
        path: str = "provider",
        proxy_reason: Optional[str] = None,
        partial_text: str = "",
    ):
        super().__init__(message)
        self.path = path
        self.proxy_reason = proxy_reason
        self.partial_text = partial_text


class ConfigurationError(ProviderError):
    """Provider credential is missing. Recoverable via mock mode."""

    def __init__(self, message: str):
        super().__init__(message, path="configuration")


class ProxyError(LegosphereError):
    """Remote orchestration endpoint failed or answered non-2xx."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ParseError(LegosphereError):
    """Model output could not be parsed into the expected shape."""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text
