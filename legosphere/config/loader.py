"""
Configuration management and loading.

Handles application settings and environment variables.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

# Truncation budgets for upstream text folded into prompts
DEFAULT_CONTEXT_CHAR_BUDGET = 15000
DEFAULT_DOCUMENT_CHAR_BUDGET = 30000


@dataclass(frozen=True)
class UsageConfig:
    """Word quota and where its consumption is persisted."""
    total_units: int = 10_000_000
    seed_used_units: int = 1_508_174
    db_path: str = ".legosphere.db"
    user_id: int = 1

    def __post_init__(self):
        """Validate quota values."""
        if self.total_units <= 0:
            raise ValueError("total_units must be > 0")
        if not 0 <= self.seed_used_units <= self.total_units:
            raise ValueError("seed_used_units must be between 0 and total_units")
        if not self.db_path:
            raise ValueError("db_path cannot be empty")


@dataclass(frozen=True)
class ProviderConfig:
    """Direct provider settings. The credential itself lives in the environment."""
    model: str = "gpt-4o-mini"
    api_key_env: str = "OPENAI_API_KEY"
    max_attempts: int = 3

    def __post_init__(self):
        if not self.model:
            raise ValueError("model cannot be empty")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def api_key(self, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
        """Read the credential from the environment, treating blank as absent."""
        env = os.environ if environ is None else environ
        value = (env.get(self.api_key_env) or "").strip()
        return value or None


@dataclass(frozen=True)
class MockConfig:
    """Timing of the credential-less placeholder provider."""
    delay_seconds: float = 1.0
    chunk_size: int = 10
    chunk_delay_seconds: float = 0.05

    def __post_init__(self):
        if self.delay_seconds < 0 or self.chunk_delay_seconds < 0:
            raise ValueError("mock delays must be >= 0")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")


@dataclass(frozen=True)
class ProxyConfig:
    """Remote orchestration endpoint."""
    enabled: bool = True
    base_url: str = "http://localhost:3001/api"
    timeout_seconds: float = 30.0

    def __post_init__(self):
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")


@dataclass(frozen=True)
class ExtractionConfig:
    """Character budgets applied before composing prompts."""
    context_char_budget: int = DEFAULT_CONTEXT_CHAR_BUDGET
    document_char_budget: int = DEFAULT_DOCUMENT_CHAR_BUDGET

    def __post_init__(self):
        if self.context_char_budget <= 0 or self.document_char_budget <= 0:
            raise ValueError("character budgets must be > 0")


@dataclass(frozen=True)
class Settings:
    """Complete application configuration."""
    usage: UsageConfig = field(default_factory=UsageConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    mock: MockConfig = field(default_factory=MockConfig)
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)


# section name -> (dataclass, {key: accepted types})
_SECTIONS: Dict[str, Any] = {
    'usage': (UsageConfig, {
        'total_units': (int,),
        'seed_used_units': (int,),
        'db_path': (str,),
        'user_id': (int,),
    }),
    'provider': (ProviderConfig, {
        'model': (str,),
        'api_key_env': (str,),
        'max_attempts': (int,),
    }),
    'mock': (MockConfig, {
        'delay_seconds': (int, float),
        'chunk_size': (int,),
        'chunk_delay_seconds': (int, float),
    }),
    'proxy': (ProxyConfig, {
        'enabled': (bool,),
        'base_url': (str,),
        'timeout_seconds': (int, float),
    }),
    'extraction': (ExtractionConfig, {
        'context_char_budget': (int,),
        'document_char_budget': (int,),
    }),
}


def load_settings(path: Optional[str] = None) -> Settings:
    """Load and validate settings from a YAML file.

    Strict validation ensures no silent misconfigurations. Every section
    is optional; omitted values keep their defaults.

    Args:
        path: Path to YAML configuration file, or None for defaults

    Returns:
        Validated Settings object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    if path is None:
        return Settings()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        return Settings()
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration root must be a dictionary")

    unknown_keys = set(raw_config.keys()) - set(_SECTIONS)
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    sections = {}
    for name, (config_cls, schema) in _SECTIONS.items():
        data = raw_config.get(name) or {}
        if not isinstance(data, dict):
            raise ValueError(f"'{name}' must be a dictionary")
        sections[name] = config_cls(**_parse_section(data, schema, name))

    return Settings(**sections)


def _parse_section(data: Dict, schema: Dict[str, tuple], path: str) -> Dict[str, Any]:
    """Check keys and value types of one configuration section.

    Args:
        data: Section data
        schema: Allowed keys and their accepted types
        path: Path for error messages

    Returns:
        Keyword arguments for the section's dataclass

    Raises:
        ValueError: If a key is unknown or a value has the wrong type
    """
    unknown_keys = set(data.keys()) - set(schema)
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    parsed = {}
    for key, value in data.items():
        accepted = schema[key]
        # bool is an int subclass; only accept it where bool is expected
        if isinstance(value, bool) and bool not in accepted:
            raise ValueError(f"'{key}' in {path} must be of type {accepted[0].__name__}")
        if not isinstance(value, accepted):
            raise ValueError(f"'{key}' in {path} must be of type {accepted[0].__name__}")
        parsed[key] = float(value) if float in accepted else value
    return parsed
