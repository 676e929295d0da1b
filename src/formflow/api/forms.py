"""
Form submission relay.

When a workflow names a site form, intake also posts the raw submission to
that form so the site keeps its own record even if AI processing fails.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class FormRelay:
    """Best-effort forwarder of submissions to the site's form handler."""

    def __init__(
        self,
        site_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize form relay.

        Args:
            site_url: URL of the site form handler
            client: HTTP client to use. Created lazily if omitted.
            timeout: Request timeout in seconds
        """
        self.site_url = site_url
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

    async def relay(self, form_name: str, data: Dict[str, Any]) -> bool:
        """
        Post the submission as a url-encoded form.

        Failures are logged and reported as False, never raised.
        """
        body = {"form-name": form_name}
        for key, value in data.items():
            if value is not None:
                body[key] = str(value)

        client = await self._get_client()
        try:
            response = await client.post(self.site_url, data=body)
        except httpx.RequestError as e:
            logger.error(f"Error submitting to form {form_name!r}: {e}")
            return False

        if not response.is_success:
            logger.error(f"Failed to submit to form {form_name!r}: {response.status_code}")
            return False

        logger.info(f"Submission relayed to form {form_name!r}")
        return True
