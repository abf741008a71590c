"""
Generation routing.

One-shot requests try the proxy first and fall back to the provider.
Streaming requests always go to the provider because the proxy cannot
stream; those requests therefore skip server-side accounting.

Failure contract:
1. Proxy failure - silent, logged, recovered by a single provider attempt
2. Provider failure - terminal, raised to the caller as ProviderError
"""

import logging
from typing import Optional, Protocol, Union

from ..sdk.base import ChunkSink, TextProvider
from .errors import ProviderError, ProxyError
from .outcomes import GenerationPath, Outcome, ProviderFailed, ProxyFailed, Success
from .word_counter import GenerationResult

logger = logging.getLogger(__name__)


class ProxyBackend(Protocol):
    def generate(self, prompt: str, feature: str = "general") -> str: ...

    def close(self) -> None: ...


def _require_prompt(prompt: str) -> None:
    if not prompt or not prompt.strip():
        raise ValueError("prompt is required and cannot be empty")


class GenerationRouter:
    """Decides which backend serves a generation request.

    The rest of the application depends only on ``generate_text`` and
    ``stream_text``; callers never learn which path produced the text.
    """

    def __init__(self, provider: TextProvider, proxy: Optional[ProxyBackend] = None):
        self.provider = provider
        self.proxy = proxy

    def route(self, prompt: str, feature: str = "general") -> Outcome:
        """Run the proxy-then-provider policy and return the final outcome.

        Never returns ``ProxyFailed``: a failed proxy attempt always leads
        to a provider attempt, whose outcome is the final one.
        """
        _require_prompt(prompt)

        proxy_reason = None
        if self.proxy is not None:
            proxy_outcome = self._try_proxy(prompt, feature)
            if isinstance(proxy_outcome, Success):
                return proxy_outcome
            proxy_reason = proxy_outcome.reason
            logger.warning("Proxy unavailable, falling back to provider: %s", proxy_reason)

        return self._try_provider(prompt, proxy_reason)

    def generate_text(self, prompt: str, feature: str = "general") -> GenerationResult:
        """Generate the full text for a prompt.

        Raises:
            ValueError: If prompt is empty
            ProviderError: If the provider failed after any proxy fallback
        """
        outcome = self.route(prompt, feature)
        if isinstance(outcome, Success):
            logger.debug("Generated %d characters via %s", len(outcome.text), outcome.path.value)
            return GenerationResult(text=outcome.text)
        raise outcome.error

    def stream_text(self, prompt: str, on_chunk: ChunkSink, feature: str = "general") -> None:
        """Stream fragments of the generated text to ``on_chunk`` in order.

        Raises:
            ValueError: If prompt is empty
            ProviderError: If the stream fails, possibly after some fragments
        """
        _require_prompt(prompt)
        logger.debug("Streaming via provider (feature=%s): %s...", feature, prompt[:50])
        self.provider.generate_stream(prompt, on_chunk)

    def _try_proxy(self, prompt: str, feature: str) -> Union[Success, ProxyFailed]:
        try:
            text = self.proxy.generate(prompt, feature)
        except ProxyError as e:
            return ProxyFailed(reason=str(e), error=e)
        return Success(text=text, path=GenerationPath.PROXY)

    def _try_provider(self, prompt: str, proxy_reason: Optional[str]) -> Union[Success, ProviderFailed]:
        try:
            text = self.provider.generate(prompt)
        except ProviderError as e:
            logger.error("Provider generation failed: %s", e)
            if proxy_reason is not None:
                error = ProviderError(
                    f"Generation failed on both paths. Provider: {e}",
                    path=e.path,
                    proxy_reason=proxy_reason
                )
                error.__cause__ = e
            else:
                error = e
            return ProviderFailed(reason=str(e), error=error)
        return Success(text=text, path=GenerationPath.PROVIDER)
