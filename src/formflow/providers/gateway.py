"""
AI provider gateway.

Turns a workflow definition and a form submission into a parsed JSON object:
render the prompt, wrap it in the structured-output preamble, call the
configured vendor, strip any code fence from the answer and parse it.

The parsed object is NOT validated against the workflow's output schema.
Callers must tolerate drift between the schema and the returned keys.
"""

import json
import logging
import re
from typing import Any, Dict, Mapping, Optional

import httpx
from opentelemetry import trace

from ..core.errors import UnparseableOutputError
from ..core.templates import interpolate
from ..models.workflow import OutputSchema, WorkflowConfig
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

SYSTEM_PROMPT_TEMPLATE = """You are a data processing assistant. You will receive form submission data and must transform it according to the user's instructions.

Your response MUST be valid JSON that matches this schema:
{schema}

Respond with ONLY the JSON object, no additional text or markdown formatting."""

USER_PROMPT_TEMPLATE = """Form submission data:
{submission}

Instructions:
{instructions}"""

_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\r?\n?")
_CLOSING_FENCE = re.compile(r"\r?\n?```\s*$")


def build_system_prompt(output_schema: OutputSchema) -> str:
    """Build the instruction preamble embedding the output schema."""
    schema = json.dumps(output_schema.to_document(), indent=2)
    return SYSTEM_PROMPT_TEMPLATE.format(schema=schema)


def build_user_prompt(input: Mapping[str, Any], instructions: str) -> str:
    """Build the user turn carrying the submission and rendered instructions."""
    submission = json.dumps(dict(input), indent=2, default=str)
    return USER_PROMPT_TEMPLATE.format(submission=submission, instructions=instructions)


def strip_code_fences(text: str) -> str:
    """
    Remove a surrounding markdown code fence, with or without a language tag.

    Text without a leading fence is returned trimmed. Applying this twice
    gives the same result as applying it once.
    """
    content = text.strip()
    if content.startswith("```"):
        content = _OPENING_FENCE.sub("", content, count=1)
        content = _CLOSING_FENCE.sub("", content, count=1)
    return content.strip()


def parse_output(text: str, provider: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse model text into a JSON object.

    Raises:
        UnparseableOutputError: If the text is not a JSON object after
            fence stripping. The raw text is kept for diagnosis.
    """
    content = strip_code_fences(text)
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        raise UnparseableOutputError(
            f"Failed to parse AI response as JSON: {text}",
            raw_text=text,
            provider=provider,
        )

    if not isinstance(parsed, dict):
        raise UnparseableOutputError(
            f"AI response is not a JSON object: {text}",
            raw_text=text,
            provider=provider,
        )

    return parsed


class AIGateway:
    """
    Single entry point for structured completions across vendors.

    Owns one shared async HTTP client for all adapters.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the gateway.

        Args:
            registry: Provider adapters
            client: HTTP client to use. Created lazily if omitted.
        """
        self.registry = registry
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def invoke(self, config: WorkflowConfig, input: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Run the workflow's prompt against its provider and parse the result.

        Args:
            config: Workflow definition (prompt, schema, provider, model)
            input: Captured form submission

        Returns:
            Parsed JSON object produced by the model

        Raises:
            ProviderError: On unsupported provider, missing credential,
                vendor failure, missing response node or unparseable output
        """
        adapter = self.registry.get_provider(config.provider)

        instructions = interpolate(config.prompt, input)
        system_prompt = build_system_prompt(config.output_schema)
        user_prompt = build_user_prompt(input, instructions)

        with tracer.start_as_current_span("provider_invoke") as span:
            span.set_attribute("provider", adapter.name)
            span.set_attribute("model", config.model)
            span.set_attribute("prompt_length", len(user_prompt))

            client = await self._get_client()
            logger.info(f"Calling {adapter.name} model {config.model} for workflow {config.id}")
            text = await adapter.complete(client, config.model, system_prompt, user_prompt)
            span.set_attribute("response_length", len(text))

        return parse_output(text, provider=adapter.name)
