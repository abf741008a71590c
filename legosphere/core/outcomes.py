"""
Outcomes of a routed generation attempt.

The router threads one of these values through its decision instead of
relying on nested try/except chains.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .errors import ProviderError, ProxyError


class GenerationPath(Enum):
    """Which backend produced the text."""
    PROXY = "proxy"
    PROVIDER = "provider"


@dataclass(frozen=True)
class Success:
    text: str
    path: GenerationPath


@dataclass(frozen=True)
class ProxyFailed:
    """Proxy attempt failed. Always recoverable."""
    reason: str
    error: ProxyError


@dataclass(frozen=True)
class ProviderFailed:
    """Provider attempt failed. Terminal for the call."""
    reason: str
    error: ProviderError


Outcome = Union[Success, ProxyFailed, ProviderFailed]
