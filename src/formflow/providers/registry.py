"""
Provider registry for selecting vendor adapters by workflow provider name.
"""

import logging
from typing import Dict, List, Any, Optional, Type

from ..config import ProviderSettings
from ..core.errors import UnsupportedProviderError
from .interface import AbstractProvider, ProviderType
from .anthropic_adapter import AnthropicAdapter
from .openai_adapter import OpenAIAdapter
from .google_adapter import GoogleAdapter

logger = logging.getLogger(__name__)


# Shown to editors when choosing a provider and model
DEFAULT_PROVIDER_CATALOG: List[Dict[str, Any]] = [
    {
        "id": "anthropic",
        "name": "Anthropic",
        "models": [
            {"id": "claude-sonnet-4-20250514", "name": "Claude Sonnet 4"},
            {"id": "claude-opus-4-5-20251101", "name": "Claude Opus 4.5"},
        ],
    },
    {
        "id": "openai",
        "name": "OpenAI",
        "models": [
            {"id": "gpt-4o", "name": "GPT-4o"},
            {"id": "gpt-4o-mini", "name": "GPT-4o Mini"},
        ],
    },
    {
        "id": "google",
        "name": "Google",
        "models": [
            {"id": "gemini-1.5-pro", "name": "Gemini 1.5 Pro"},
            {"id": "gemini-1.5-flash", "name": "Gemini 1.5 Flash"},
        ],
    },
]


class ProviderRegistry:
    """
    Registry of provider adapters.

    Adapter instances are created lazily from settings, one per provider.
    """

    def __init__(self, settings: Optional[Dict[str, ProviderSettings]] = None):
        """
        Initialize the registry.

        Args:
            settings: Connection settings keyed by provider name
        """
        self._settings: Dict[str, ProviderSettings] = settings or {}
        self._adapters: Dict[ProviderType, Type[AbstractProvider]] = {}
        self._instances: Dict[ProviderType, AbstractProvider] = {}

    def register_adapter(
        self,
        provider_type: ProviderType,
        adapter_class: Type[AbstractProvider],
    ) -> None:
        """
        Register an adapter class for a provider type.

        Args:
            provider_type: Provider handled by the adapter
            adapter_class: Adapter class to register
        """
        self._adapters[provider_type] = adapter_class
        self._instances.pop(provider_type, None)
        logger.debug(f"Registered provider adapter: {provider_type.value}")

    def get_provider(self, name: str) -> AbstractProvider:
        """
        Get the adapter for a configured provider name.

        Raises:
            UnsupportedProviderError: If the name maps to no registered adapter
        """
        provider_type = ProviderType.resolve(name)

        instance = self._instances.get(provider_type)
        if instance is not None:
            return instance

        adapter_class = self._adapters.get(provider_type)
        if adapter_class is None:
            raise UnsupportedProviderError(name)

        settings = self._settings.get(provider_type.value)
        kwargs: Dict[str, Any] = {}
        if settings is not None:
            kwargs = {
                "api_key": settings.api_key,
                "base_url": settings.base_url,
                "timeout": settings.timeout,
                **settings.extra,
            }

        instance = adapter_class(**kwargs)
        self._instances[provider_type] = instance
        logger.info(f"Created provider adapter: {instance!r}")
        return instance

    def list_providers(self) -> List[str]:
        """Names of providers with a registered adapter."""
        return [p.value for p in self._adapters]


def create_default_registry(settings: Optional[Dict[str, ProviderSettings]] = None) -> ProviderRegistry:
    """Build a registry with the Anthropic, OpenAI and Google adapters."""
    registry = ProviderRegistry(settings)
    registry.register_adapter(ProviderType.ANTHROPIC, AnthropicAdapter)
    registry.register_adapter(ProviderType.OPENAI, OpenAIAdapter)
    registry.register_adapter(ProviderType.GOOGLE, GoogleAdapter)
    return registry
