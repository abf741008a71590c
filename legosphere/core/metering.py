"""
Usage metering around the generation router.

Every generated word is charged to the ledger, whether it came whole or
in streamed fragments.
"""

import logging
from typing import List

from ..sdk.base import ChunkSink
from .errors import ProviderError
from .ledger import UsageLedger
from .router import GenerationRouter
from .word_counter import GenerationResult

logger = logging.getLogger(__name__)


class MeteredGenerator:
    """Router front-end that deducts word usage after each call."""

    def __init__(self, router: GenerationRouter, ledger: UsageLedger):
        self.router = router
        self.ledger = ledger

    def generate(self, prompt: str, feature: str = "general") -> GenerationResult:
        """Generate text and charge its word count under ``feature``.

        Raises:
            ValueError: If prompt or feature is empty
            ProviderError: If generation failed on every path
        """
        _require_feature(feature)
        result = self.router.generate_text(prompt, feature)
        self.ledger.deduct(result.word_count, feature)
        return result

    def stream(self, prompt: str, on_chunk: ChunkSink, feature: str = "chat-pdf") -> GenerationResult:
        """Stream text to ``on_chunk`` and charge the accumulated words.

        If the stream breaks midway, or ``on_chunk`` itself raises, the words
        already delivered are still charged before the error is re-raised.
        A ``ProviderError`` carries them as ``partial_text`` so the caller
        can keep what it rendered.

        Raises:
            ValueError: If prompt or feature is empty
            ProviderError: If the stream fails
        """
        _require_feature(feature)
        pieces: List[str] = []

        def sink(chunk: str) -> None:
            pieces.append(chunk)
            on_chunk(chunk)

        try:
            self.router.stream_text(prompt, sink, feature)
        except ProviderError as e:
            e.partial_text = self._charge_partial(pieces, feature)
            raise
        except Exception:
            self._charge_partial(pieces, feature)
            raise

        result = GenerationResult(text="".join(pieces))
        self.ledger.deduct(result.word_count, feature)
        return result

    def _charge_partial(self, pieces: List[str], feature: str) -> str:
        partial = GenerationResult(text="".join(pieces))
        if partial.word_count:
            logger.warning(
                "Stream stopped after %d chunks; charging %d partial words",
                len(pieces), partial.word_count
            )
            self.ledger.deduct(partial.word_count, feature)
        return partial.text


def _require_feature(feature: str) -> None:
    if not feature or not feature.strip():
        raise ValueError("feature is required and cannot be empty")
