"""
Configuration for the formflow service.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Application configuration."""

    # Storage. Empty means in-memory stores.
    database_url: str = os.getenv("DATABASE_URL", "")

    # Tenant used when a request carries no X-Site-Id header
    site_id: str = os.getenv("SITE_ID", "default")

    # AI providers
    anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY")
    anthropic_base_url: str = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
    openai_api_key: Optional[str] = os.getenv("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com")
    gemini_api_key: Optional[str] = os.getenv("GEMINI_API_KEY")
    gemini_base_url: str = os.getenv(
        "GOOGLE_GEMINI_BASE_URL",
        "https://generativelanguage.googleapis.com"
    )
    provider_timeout_seconds: float = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "120"))
    max_output_tokens: int = int(os.getenv("MAX_OUTPUT_TOKENS", "4096"))
    providers_file: Optional[str] = os.getenv("FORMFLOW_PROVIDERS_FILE")

    # Side-effect trigger (agent runners)
    agent_runner_api_url: str = os.getenv("AGENT_RUNNER_API_URL", "https://api.netlify.com/api/v1")
    agent_runner_api_token: Optional[str] = os.getenv("AGENT_RUNNER_API_TOKEN")
    agent_runner_timeout_seconds: float = float(os.getenv("AGENT_RUNNER_TIMEOUT_SECONDS", "30"))

    # Site form handler that receives a copy of each submission. Unset disables relaying.
    form_relay_url: Optional[str] = os.getenv("FORM_RELAY_URL")

    # AI gateway provider list offered to editors. Empty serves the built-in list.
    provider_catalog_url: str = os.getenv(
        "PROVIDER_CATALOG_URL",
        "https://api.netlify.com/api/v1/ai-gateway/providers"
    )

    # OpenTelemetry
    otel_enabled: bool = os.getenv("OTEL_ENABLED", "false").lower() in ("1", "true", "yes")
    otel_endpoint: str = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")

    # Server
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8090"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@dataclass
class ProviderSettings:
    """Connection settings for one AI provider."""
    name: str
    base_url: str
    api_key: Optional[str] = None
    timeout: float = 120.0
    extra: Dict[str, Any] = field(default_factory=dict)


DEFAULT_PROVIDERS_PATHS = [
    Path("config/formflow/providers.yaml"),
    Path("/etc/formflow/providers.yaml"),
]


def default_provider_settings(cfg: Config) -> Dict[str, ProviderSettings]:
    """Provider settings taken from environment configuration."""
    return {
        "anthropic": ProviderSettings(
            name="anthropic",
            base_url=cfg.anthropic_base_url,
            api_key=cfg.anthropic_api_key,
            timeout=cfg.provider_timeout_seconds,
            extra={"max_tokens": cfg.max_output_tokens},
        ),
        "openai": ProviderSettings(
            name="openai",
            base_url=cfg.openai_base_url,
            api_key=cfg.openai_api_key,
            timeout=cfg.provider_timeout_seconds,
        ),
        "google": ProviderSettings(
            name="google",
            base_url=cfg.gemini_base_url,
            api_key=cfg.gemini_api_key,
            timeout=cfg.provider_timeout_seconds,
        ),
    }


def load_provider_settings(
    cfg: Config,
    config_path: Optional[str] = None,
) -> Dict[str, ProviderSettings]:
    """
    Load provider settings, overlaying an optional YAML file on the environment.

    The file has the shape::

        providers:
          anthropic:
            base_url: https://proxy.internal/anthropic
            api_key: ${ANTHROPIC_API_KEY}
            timeout: 60

    Args:
        cfg: Environment configuration
        config_path: Path to YAML file. If None, uses FORMFLOW_PROVIDERS_FILE
            or the default locations.

    Returns:
        Settings keyed by provider name
    """
    settings = default_provider_settings(cfg)

    if config_path is None:
        config_path = cfg.providers_file
    if config_path is None:
        for p in DEFAULT_PROVIDERS_PATHS:
            if p.exists():
                config_path = str(p)
                break

    if config_path is None:
        return settings

    if not Path(config_path).exists():
        logger.warning(f"Provider config file {config_path} not found, using environment defaults")
        return settings

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        _apply_overrides(settings, data)
    except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
        logger.error(f"Failed to load provider config from {config_path}: {e}")
        return default_provider_settings(cfg)

    logger.info(f"Loaded provider config from {config_path}")
    return settings


def _expand_env(value: Any) -> Any:
    """Expand a ``${VAR}`` reference to the environment value."""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1], "")
    return value


def _apply_overrides(settings: Dict[str, ProviderSettings], data: Dict[str, Any]) -> None:
    """Overlay the parsed YAML document onto the settings in place."""
    for name, overrides in (data.get("providers") or {}).items():
        current = settings.get(name)
        if current is None:
            logger.warning(f"Ignoring settings for unknown provider {name!r}")
            continue

        overrides = overrides or {}
        if "base_url" in overrides:
            current.base_url = str(overrides["base_url"])
        if "api_key" in overrides:
            current.api_key = _expand_env(overrides["api_key"]) or None
        if "timeout" in overrides:
            current.timeout = float(overrides["timeout"])
        current.extra.update(overrides.get("extra") or {})


config = Config()
