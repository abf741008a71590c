"""
Word counting and generation results.

Words are the unit charged against the usage quota.
"""

from dataclasses import dataclass


def count_words(text: str) -> int:
    """Count whitespace-separated words. Blank text counts as zero."""
    return len(text.split())


@dataclass(frozen=True)
class GenerationResult:
    """Text produced by one generation call.

    ``word_count`` is derived from ``text`` and is what gets metered.
    """
    text: str

    @property
    def word_count(self) -> int:
        """Number of words in the generated text."""
        return count_words(self.text)
