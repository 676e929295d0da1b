"""
Provider catalog shown to workflow editors.

The live list comes from the AI gateway's provider endpoint. When the fetch
fails or is disabled, the built-in catalog is served instead. Either way only
providers with a registered adapter are listed.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.errors import UnsupportedProviderError
from .interface import ProviderType
from .registry import DEFAULT_PROVIDER_CATALOG, ProviderRegistry

logger = logging.getLogger(__name__)


PROVIDER_DISPLAY_NAMES = {
    "anthropic": "Anthropic",
    "openai": "OpenAI",
    "gemini": "Google",
    "google": "Google",
}


class ProviderCatalog:
    """
    Lists selectable providers and their models.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        catalog_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize the catalog.

        Args:
            registry: Registry whose adapters bound the listed providers
            catalog_url: AI gateway provider endpoint. None serves the built-in list.
            client: HTTP client to use. Created lazily if omitted.
            timeout: Request timeout in seconds
        """
        self.registry = registry
        self.catalog_url = catalog_url or None
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def list(self) -> List[Dict[str, Any]]:
        """
        Providers offered to editors.

        Returns:
            Entries with ``id``, ``name`` and ``models``
        """
        entries = DEFAULT_PROVIDER_CATALOG
        if self.catalog_url:
            try:
                entries = await self._fetch()
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Failed to fetch provider catalog from {self.catalog_url}: {e}")
                entries = DEFAULT_PROVIDER_CATALOG

        supported = set(self.registry.list_providers())
        return [e for e in entries if self._resolve(e["id"]) in supported]

    async def _fetch(self) -> List[Dict[str, Any]]:
        """Fetch and reshape the gateway's ``{"providers": {id: {...}}}`` document."""
        client = await self._get_client()
        response = await client.get(self.catalog_url)
        response.raise_for_status()

        data = response.json()
        providers = data.get("providers") if isinstance(data, dict) else None
        if not isinstance(providers, dict):
            raise ValueError("response has no providers object")

        entries = []
        for provider_id, provider in providers.items():
            provider = provider if isinstance(provider, dict) else {}
            entries.append({
                "id": provider_id,
                "name": PROVIDER_DISPLAY_NAMES.get(provider_id, provider_id),
                "models": provider.get("models") or [],
            })
        return entries

    @staticmethod
    def _resolve(provider_id: str) -> Optional[str]:
        try:
            return ProviderType.resolve(provider_id).value
        except UnsupportedProviderError:
            return None
