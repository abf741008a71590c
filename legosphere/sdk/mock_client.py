"""
Placeholder provider used when no credential is configured.

Keeps the application usable offline: results are clearly labeled and
arrive after a fixed synthetic delay.
"""

import time
from typing import Callable

from .base import ChunkSink

MOCK_PREFIX = "[MOCK RESPONSE]"


class MockProvider:
    """Credential-less stand-in for the real provider.

    ``generate`` and ``generate_stream`` produce the same text for the same
    prompt; streaming just slices it into ``chunk_size`` pieces.
    """

    def __init__(
        self,
        delay_seconds: float = 1.0,
        chunk_size: int = 10,
        chunk_delay_seconds: float = 0.05,
        sleep: Callable[[float], None] = time.sleep
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self.delay_seconds = delay_seconds
        self.chunk_size = chunk_size
        self.chunk_delay_seconds = chunk_delay_seconds
        self._sleep = sleep

    @staticmethod
    def mock_text(prompt: str) -> str:
        return (
            f"{MOCK_PREFIX} This is a simulated response because the API key is missing."
            f"\n\nPrompt: {prompt}"
        )

    def generate(self, prompt: str) -> str:
        self._sleep(self.delay_seconds)
        return self.mock_text(prompt)

    def generate_stream(self, prompt: str, on_chunk: ChunkSink) -> None:
        text = self.mock_text(prompt)
        for start in range(0, len(text), self.chunk_size):
            self._sleep(self.chunk_delay_seconds)
            on_chunk(text[start:start + self.chunk_size])
