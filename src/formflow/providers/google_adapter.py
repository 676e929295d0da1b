"""
Google Gemini generateContent API adapter.
"""

from typing import Any, Dict

from ..core.errors import ProviderError
from .interface import AbstractProvider, ProviderRequest, ProviderType


class GoogleAdapter(AbstractProvider):
    """
    Google Gemini adapter.

    The answer is ``candidates[0].content.parts[0].text``. The API key goes in
    the ``x-goog-api-key`` header so it never appears in logged URLs.
    """

    provider_type = ProviderType.GOOGLE
    display_name = "Google"
    api_key_env = "GEMINI_API_KEY"
    default_base_url = "https://generativelanguage.googleapis.com"

    def build_request(self, model: str, system_prompt: str, user_prompt: str) -> ProviderRequest:
        api_key = self.require_api_key()
        return ProviderRequest(
            url=f"{self._base_url}/v1beta/models/{model}:generateContent",
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": api_key,
            },
            json={
                "systemInstruction": {"parts": [{"text": system_prompt}]},
                "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            },
        )

    def parse_response(self, data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if candidates and isinstance(candidates[0], dict):
            content = candidates[0].get("content")
            parts = content.get("parts") if isinstance(content, dict) else None
            if parts and isinstance(parts[0], dict):
                text = parts[0].get("text")
                if isinstance(text, str) and text:
                    return text

        raise ProviderError("No content in Google response", provider=self.name)
