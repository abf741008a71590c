"""
SDK for Legosphere.

Provider and proxy clients behind the generation router.
"""

from .mock_client import MockProvider
from .openai_client import OpenAIProvider
from .proxy_client import ProxyClient

__all__ = ["MockProvider", "OpenAIProvider", "ProxyClient"]
