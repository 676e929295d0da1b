"""
OpenAI Chat Completions API adapter.
"""

from typing import Any, Dict

from ..core.errors import ProviderError
from .interface import AbstractProvider, ProviderRequest, ProviderType


class OpenAIAdapter(AbstractProvider):
    """
    OpenAI adapter.

    The answer is ``choices[0].message.content``.
    """

    provider_type = ProviderType.OPENAI
    display_name = "OpenAI"
    api_key_env = "OPENAI_API_KEY"
    default_base_url = "https://api.openai.com"

    def build_request(self, model: str, system_prompt: str, user_prompt: str) -> ProviderRequest:
        api_key = self.require_api_key()
        return ProviderRequest(
            url=f"{self._base_url}/v1/chat/completions",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            json={
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            },
        )

    def parse_response(self, data: Dict[str, Any]) -> str:
        choices = data.get("choices") or []
        if choices and isinstance(choices[0], dict):
            message = choices[0].get("message") or {}
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str) and content:
                return content

        raise ProviderError("No content in OpenAI response", provider=self.name)
