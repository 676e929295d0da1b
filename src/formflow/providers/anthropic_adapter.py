"""
Anthropic Messages API adapter.
"""

from typing import Any, Dict, Optional

from ..core.errors import ProviderError
from .interface import AbstractProvider, ProviderRequest, ProviderType


class AnthropicAdapter(AbstractProvider):
    """
    Anthropic adapter.

    The answer is the first ``text`` block of the response ``content`` array.
    """

    provider_type = ProviderType.ANTHROPIC
    display_name = "Anthropic"
    api_key_env = "ANTHROPIC_API_KEY"
    default_base_url = "https://api.anthropic.com"

    ANTHROPIC_VERSION = "2023-06-01"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        max_tokens: int = 4096,
    ):
        super().__init__(api_key=api_key, base_url=base_url, timeout=timeout)
        self._max_tokens = max_tokens

    def build_request(self, model: str, system_prompt: str, user_prompt: str) -> ProviderRequest:
        api_key = self.require_api_key()
        return ProviderRequest(
            url=f"{self._base_url}/v1/messages",
            headers={
                "Content-Type": "application/json",
                "x-api-key": api_key,
                "anthropic-version": self.ANTHROPIC_VERSION,
            },
            json={
                "model": model,
                "max_tokens": self._max_tokens,
                "system": system_prompt,
                "messages": [{"role": "user", "content": user_prompt}],
            },
        )

    def parse_response(self, data: Dict[str, Any]) -> str:
        for block in data.get("content") or []:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if isinstance(text, str):
                    return text

        raise ProviderError("No text content in Anthropic response", provider=self.name)
