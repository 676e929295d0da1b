"""
Abstract provider interface definition.

Each AI vendor adapter knows how to shape a completion request and where the
text answer lives in the vendor's response envelope. Transport and error
mapping are shared here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from ..core.errors import (
    CredentialMissingError,
    ProviderConnectionError,
    ProviderError,
    UnsupportedProviderError,
)


class ProviderType(str, Enum):
    """AI vendors with a registered adapter."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"

    @classmethod
    def resolve(cls, name: str) -> "ProviderType":
        """
        Map a configured provider name to a provider type.

        Raises:
            UnsupportedProviderError: If no adapter handles ``name``
        """
        normalized = (name or "").strip().lower()
        normalized = PROVIDER_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedProviderError(name)


PROVIDER_ALIASES = {
    "gemini": "google",
}


@dataclass
class ProviderRequest:
    """A fully built vendor HTTP request."""
    url: str
    json: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)


class AbstractProvider(ABC):
    """
    Base class for AI vendor adapters.

    Subclasses implement ``build_request`` and ``parse_response``; the shared
    ``complete`` method sends the request and maps failures to
    ``ProviderError``.
    """

    provider_type: ProviderType
    display_name: str = ""
    api_key_env: str = ""
    default_base_url: str = ""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
    ):
        """
        Initialize provider adapter.

        Args:
            api_key: Vendor API key
            base_url: Vendor API root (defaults to the public endpoint)
            timeout: Request timeout in seconds
        """
        self._api_key = api_key
        self._base_url = (base_url or self.default_base_url).rstrip("/")
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self.provider_type.value

    @property
    def base_url(self) -> str:
        return self._base_url

    def require_api_key(self) -> str:
        """Return the API key or fail before any network call."""
        if not self._api_key:
            raise CredentialMissingError(
                f"{self.api_key_env} not configured",
                provider=self.name,
            )
        return self._api_key

    @abstractmethod
    def build_request(self, model: str, system_prompt: str, user_prompt: str) -> ProviderRequest:
        """
        Build the vendor request for a single-turn completion.

        Args:
            model: Vendor model identifier
            system_prompt: Instruction preamble
            user_prompt: Submission data and task

        Returns:
            Request to send
        """
        pass

    @abstractmethod
    def parse_response(self, data: Dict[str, Any]) -> str:
        """
        Extract the text answer from the vendor response body.

        Raises:
            ProviderError: If the expected node is absent
        """
        pass

    async def complete(
        self,
        client: httpx.AsyncClient,
        model: str,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Send a completion request and return the model's text."""
        request = self.build_request(model, system_prompt, user_prompt)

        try:
            response = await client.post(
                request.url,
                json=request.json,
                headers=request.headers,
                timeout=self._timeout,
            )
        except httpx.RequestError as e:
            raise ProviderConnectionError(
                f"{self.display_name} API request failed: {e}",
                provider=self.name,
            )

        self._check_response_errors(response)

        try:
            data = response.json()
        except ValueError:
            raise ProviderError(
                f"{self.display_name} API returned a non-JSON body",
                provider=self.name,
                status_code=response.status_code,
                detail=response.text,
            )

        if not isinstance(data, dict):
            raise ProviderError(
                f"{self.display_name} API returned an unexpected body",
                provider=self.name,
                status_code=response.status_code,
            )

        return self.parse_response(data)

    def _check_response_errors(self, response: httpx.Response) -> None:
        """Raise ProviderError with vendor status and detail on non-2xx responses."""
        if response.is_success:
            return

        detail = response.text
        raise ProviderError(
            f"{self.display_name} API error: {response.status_code} {detail}",
            provider=self.name,
            status_code=response.status_code,
            detail=detail,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={self.name!r}, base_url={self._base_url!r})"
