"""
AI provider adapters and the gateway that selects between them.
"""

from .interface import AbstractProvider, ProviderRequest, ProviderType
from .anthropic_adapter import AnthropicAdapter
from .openai_adapter import OpenAIAdapter
from .google_adapter import GoogleAdapter
from .registry import ProviderRegistry, create_default_registry, DEFAULT_PROVIDER_CATALOG
from .gateway import AIGateway, strip_code_fences, parse_output
from .catalog import ProviderCatalog, PROVIDER_DISPLAY_NAMES

__all__ = [
    "AbstractProvider",
    "ProviderRequest",
    "ProviderType",
    "AnthropicAdapter",
    "OpenAIAdapter",
    "GoogleAdapter",
    "ProviderRegistry",
    "create_default_registry",
    "DEFAULT_PROVIDER_CATALOG",
    "AIGateway",
    "strip_code_fences",
    "parse_output",
    "ProviderCatalog",
    "PROVIDER_DISPLAY_NAMES",
]
