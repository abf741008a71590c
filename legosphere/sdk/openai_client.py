"""
OpenAI-backed text provider.

Talks to the model API directly, in one-shot and streamed form.
"""

import logging
from typing import Any, Iterator, Optional

import openai
from openai import OpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.errors import ConfigurationError, ProviderError
from .base import ChunkSink

logger = logging.getLogger(__name__)

# Worth another attempt; anything else fails the call immediately
TRANSIENT_ERRORS = (
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.APITimeoutError,
)


class OpenAIProvider:
    """Direct provider client over OpenAI chat completions.

    Transient API errors are retried a bounded number of times. For
    streams only the request that opens the stream is retried: once a
    chunk has reached the caller there is no retry and no undo.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        max_attempts: int = 3,
        wait: Any = None
    ):
        """Initialize the provider.

        Args:
            api_key: OpenAI credential (required)
            model: Chat model name
            max_attempts: Attempts per request for transient errors
            wait: tenacity wait strategy (defaults to exponential backoff)

        Raises:
            ConfigurationError: If api_key is missing or blank
            ValueError: If model is empty or max_attempts < 1
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError("OpenAI API key is not configured")
        if not model or not model.strip():
            raise ValueError("model is required and cannot be empty")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self.model = model
        self.max_attempts = max_attempts
        # Retries are handled here, not inside the SDK
        self.client = OpenAI(api_key=api_key, max_retries=0)
        self._retry = retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait if wait is not None else wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True
        )

    def _create(self, prompt: str, **kwargs: Any) -> Any:
        return self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            **kwargs
        )

    def generate(self, prompt: str) -> str:
        """Return the full completion text.

        Raises:
            ProviderError: If the API call fails or returns no choices
        """
        try:
            response = self._retry(self._create)(prompt)
        except Exception as e:
            logger.error("OpenAI generation failed: %s - %s", type(e).__name__, e)
            raise ProviderError(f"Provider generation failed: {e}") from e

        if not response.choices:
            raise ProviderError("Provider response contained no choices")
        return response.choices[0].message.content or ""

    def generate_stream(self, prompt: str, on_chunk: ChunkSink) -> None:
        """Deliver completion fragments to ``on_chunk`` as they arrive.

        Exceptions raised by ``on_chunk`` itself propagate unchanged.

        Raises:
            ProviderError: If opening or reading the stream fails
        """
        for piece in self._iter_stream(prompt):
            on_chunk(piece)

    def _iter_stream(self, prompt: str) -> Iterator[str]:
        try:
            stream = self._retry(self._create)(prompt, stream=True)
        except Exception as e:
            logger.error("OpenAI stream could not be opened: %s - %s", type(e).__name__, e)
            raise ProviderError(f"Provider stream failed: {e}") from e

        delivered = 0
        iterator = iter(stream)
        while True:
            try:
                chunk = next(iterator)
            except StopIteration:
                return
            except Exception as e:
                logger.error("OpenAI stream broke after %d chunks: %s", delivered, e)
                raise ProviderError(f"Provider stream interrupted: {e}") from e

            if not chunk.choices:
                continue
            text = chunk.choices[0].delta.content
            if text:
                delivered += 1
                yield text
