"""
Provider capability shared by the real and placeholder clients.
"""

from typing import Callable, Protocol

ChunkSink = Callable[[str], None]


class TextProvider(Protocol):
    """Prompt in, text or ordered text fragments out."""

    def generate(self, prompt: str) -> str:
        """Return the full generated text.

        Raises:
            ProviderError: If generation fails
        """
        ...

    def generate_stream(self, prompt: str, on_chunk: ChunkSink) -> None:
        """Deliver fragments to ``on_chunk`` in arrival order, then return.

        Raises:
            ProviderError: If the transport fails; fragments already
                delivered are not undone
        """
        ...
