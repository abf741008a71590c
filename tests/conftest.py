"""
Pytest configuration and shared fixtures for Legosphere tests
"""

from typing import List, Optional

import pytest

from legosphere.core.errors import ProviderError, ProxyError
from legosphere.core.ledger import UsageLedger, UsageState
from legosphere.core.metering import MeteredGenerator
from legosphere.core.router import GenerationRouter


class StubProvider:
    """Provider returning canned text or failing on demand."""

    def __init__(self, text: str = "ok", chunks: Optional[List[str]] = None,
                 fail: bool = False, fail_after: Optional[int] = None):
        self.text = text
        self.chunks = chunks if chunks is not None else [text]
        self.fail = fail
        self.fail_after = fail_after
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise ProviderError("provider down")
        return self.text

    def generate_stream(self, prompt: str, on_chunk) -> None:
        self.prompts.append(prompt)
        if self.fail:
            raise ProviderError("provider down")
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise ProviderError("stream interrupted")
            on_chunk(chunk)


class StubProxy:
    def __init__(self, text: str = "from proxy", fail: bool = False):
        self.text = text
        self.fail = fail
        self.calls: List[tuple] = []
        self.closed = False

    def generate(self, prompt: str, feature: str = "general") -> str:
        self.calls.append((prompt, feature))
        if self.fail:
            raise ProxyError("proxy down", status_code=503)
        return self.text

    def close(self) -> None:
        self.closed = True


class MemoryStore:
    """In-memory stand-in for SqliteUsageStore."""

    def __init__(self, used: Optional[int] = None, fail: bool = False):
        self.used = used
        self.fail = fail
        self.log: List[tuple] = []

    def load(self) -> Optional[int]:
        return self.used

    def persist(self, used_units: int, feature: str, units: int) -> None:
        if self.fail:
            raise OSError("disk full")
        self.used = used_units
        self.log.append((feature, units))


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def ledger(memory_store):
    return UsageLedger(UsageState(total_units=1000, used_units=0), memory_store)


def make_generator(provider=None, proxy=None, ledger=None):
    """Metered generator over stubs; returns (generator, ledger)."""
    ledger = ledger or UsageLedger(UsageState(total_units=1000, used_units=0), MemoryStore())
    router = GenerationRouter(provider=provider or StubProvider(), proxy=proxy)
    return MeteredGenerator(router, ledger), ledger
