"""
Side-effect trigger client.

Actions fire by creating an agent runner for the tenant's site with the
rendered instruction as its prompt.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from ..core.errors import ActionDispatchError

logger = logging.getLogger(__name__)


class SideEffectTrigger(ABC):
    """Something that can start an external side effect from an instruction."""

    @abstractmethod
    async def trigger(self, tenant: str, instruction: str) -> str:
        """
        Start the side effect.

        Args:
            tenant: Site the side effect runs against
            instruction: Rendered action prompt

        Returns:
            Identifier of the created side effect

        Raises:
            ActionDispatchError: If the side effect could not be created
        """
        pass


class AgentRunnerClient(SideEffectTrigger):
    """
    Async HTTP client for the agent runners API.
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize agent runner client.

        Args:
            base_url: API root, e.g. https://api.netlify.com/api/v1
            api_token: Bearer token for the API
            timeout: Request timeout in seconds
            client: HTTP client to use. Created lazily if omitted.
        """
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
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

    async def trigger(self, tenant: str, instruction: str) -> str:
        if not self.api_token:
            raise ActionDispatchError("Agent runner API token not configured")

        client = await self._get_client()
        logger.info(f"Creating agent runner for site {tenant} (prompt length {len(instruction)})")

        try:
            response = await client.post(
                f"{self.base_url}/agent_runners",
                params={"site_id": tenant},
                json={"prompt": instruction},
                headers={
                    "Authorization": f"Bearer {self.api_token}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.RequestError as e:
            raise ActionDispatchError(f"Failed to create agent runner: {e}")

        if not response.is_success:
            logger.error(f"Agent runners API error: {response.status_code} {response.text}")
            raise ActionDispatchError(
                f"Failed to create agent runner: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        try:
            runner = response.json()
        except ValueError:
            raise ActionDispatchError("Agent runners API returned a non-JSON body")

        runner_id = runner.get("id") if isinstance(runner, dict) else None
        if not runner_id:
            raise ActionDispatchError("Agent runners API response has no id")

        return str(runner_id)
