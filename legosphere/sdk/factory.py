"""
Wiring of providers, router, ledger and features from settings.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from ..config.loader import Settings
from ..core.drafting import DraftingAssistant
from ..core.errors import ConfigurationError
from ..core.extractors import StructuredExtractor
from ..core.ledger import UsageLedger
from ..core.metering import MeteredGenerator
from ..core.router import GenerationRouter
from ..storage.repository import SqliteUsageStore
from .base import TextProvider
from .mock_client import MockProvider
from .openai_client import OpenAIProvider
from .proxy_client import ProxyClient

logger = logging.getLogger(__name__)


def build_provider(
    settings: Settings,
    environ: Optional[Mapping[str, str]] = None,
    sleep: Callable[[float], None] = time.sleep
) -> TextProvider:
    """Real provider when a credential is present, placeholder otherwise."""
    try:
        return OpenAIProvider(
            api_key=settings.provider.api_key(environ),
            model=settings.provider.model,
            max_attempts=settings.provider.max_attempts
        )
    except ConfigurationError as e:
        logger.warning("%s (env %s); using mock provider", e, settings.provider.api_key_env)
        return MockProvider(
            delay_seconds=settings.mock.delay_seconds,
            chunk_size=settings.mock.chunk_size,
            chunk_delay_seconds=settings.mock.chunk_delay_seconds,
            sleep=sleep
        )


def build_router(settings: Settings, environ: Optional[Mapping[str, str]] = None) -> GenerationRouter:
    proxy = None
    if settings.proxy.enabled:
        proxy = ProxyClient(
            settings.proxy.base_url,
            user_id=settings.usage.user_id,
            timeout=settings.proxy.timeout_seconds
        )
    return GenerationRouter(provider=build_provider(settings, environ), proxy=proxy)


def open_ledger(settings: Settings) -> UsageLedger:
    store = SqliteUsageStore(settings.usage.db_path, settings.usage.user_id)
    return UsageLedger.open(
        store,
        total_units=settings.usage.total_units,
        seed_used_units=settings.usage.seed_used_units
    )


@dataclass
class Application:
    """Everything a front-end needs, built once per process."""
    settings: Settings
    ledger: UsageLedger
    generator: MeteredGenerator
    extractor: StructuredExtractor
    drafting: DraftingAssistant

    def close(self) -> None:
        """Release the proxy connection pool, if one was opened."""
        proxy = self.generator.router.proxy
        if proxy is not None:
            proxy.close()


def build_application(settings: Settings, environ: Optional[Mapping[str, str]] = None) -> Application:
    ledger = open_ledger(settings)
    generator = MeteredGenerator(build_router(settings, environ), ledger)
    return Application(
        settings=settings,
        ledger=ledger,
        generator=generator,
        extractor=StructuredExtractor(generator, settings.extraction),
        drafting=DraftingAssistant(generator, settings.extraction)
    )
