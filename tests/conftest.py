"""
Shared fixtures for formflow tests.

Vendor and agent runner HTTP calls are served by httpx.MockTransport; storage
is the in-memory blob store.
"""
import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from formflow.actions import ActionDispatcher, SideEffectTrigger
from formflow.config import ProviderSettings
from formflow.core.errors import ActionDispatchError
from formflow.models import OutputSchema, WorkflowAction, WorkflowConfig
from formflow.orchestrator import RunOrchestrator
from formflow.persistence import BlobRunStore, BlobWorkflowConfigRepository, InMemoryBlobStore
from formflow.providers import AIGateway, create_default_registry


TENANT = "site-123"


def anthropic_body(text: str) -> Dict[str, Any]:
    return {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
    }


def openai_body(text: str) -> Dict[str, Any]:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": text}}],
    }


def google_body(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


class ProviderStub:
    """Serves queued vendor responses and records the requests it saw."""

    def __init__(self):
        self.responses: List[httpx.Response] = []
        self.requests: List[httpx.Request] = []

    def reply(self, body: Dict[str, Any], status_code: int = 200) -> "ProviderStub":
        self.responses.append(httpx.Response(status_code, json=body))
        return self

    def reply_text(self, text: str, status_code: int) -> "ProviderStub":
        self.responses.append(httpx.Response(status_code, text=text))
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, text="no stubbed response")
        return self.responses.pop(0)

    @property
    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


class RecordingTrigger(SideEffectTrigger):
    """Side-effect trigger that records calls and returns predictable ids."""

    def __init__(self, fail_on: Optional[Callable[[str], bool]] = None):
        self.calls: List[tuple] = []
        self.fail_on = fail_on

    async def trigger(self, tenant: str, instruction: str) -> str:
        self.calls.append((tenant, instruction))
        if self.fail_on and self.fail_on(instruction):
            raise ActionDispatchError("Failed to create agent runner: 500 boom", status_code=500)
        return f"r{len(self.calls)}"


def provider_settings() -> Dict[str, ProviderSettings]:
    return {
        "anthropic": ProviderSettings(name="anthropic", base_url="https://anthropic.test", api_key="sk-ant-test"),
        "openai": ProviderSettings(name="openai", base_url="https://openai.test", api_key="sk-openai-test"),
        "google": ProviderSettings(name="google", base_url="https://gemini.test", api_key="gemini-test"),
    }


def build_config(**overrides: Any) -> WorkflowConfig:
    data: Dict[str, Any] = {
        "id": "wf-1",
        "name": "Contact triage",
        "input_fields": ["msg"],
        "prompt": "Summarize: {{msg}}",
        "output_schema": OutputSchema(
            type="object",
            properties={"summary": OutputSchema(type="string")},
            required=["summary"],
        ),
        "provider": "anthropic",
        "model": "claude-sonnet-4-20250514",
    }
    data.update(overrides)
    return WorkflowConfig(**data)


def bug_action() -> WorkflowAction:
    return WorkflowAction(
        id="act-1",
        name="File bug",
        condition={"field": "category", "operator": "equals", "value": "bug"},
        prompt_template="Fix {{output.category}} reported by {{email}}",
    )


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def gateway(provider_stub: ProviderStub) -> AIGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(provider_stub.handler))
    return AIGateway(create_default_registry(provider_settings()), client=client)


@pytest.fixture
def trigger() -> RecordingTrigger:
    return RecordingTrigger()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def configs(blob_store: InMemoryBlobStore) -> BlobWorkflowConfigRepository:
    return BlobWorkflowConfigRepository(blob_store)


@pytest.fixture
def runs(blob_store: InMemoryBlobStore) -> BlobRunStore:
    return BlobRunStore(blob_store)


@pytest.fixture
def orchestrator(configs, runs, gateway, trigger) -> RunOrchestrator:
    return RunOrchestrator(
        configs=configs,
        runs=runs,
        gateway=gateway,
        dispatcher=ActionDispatcher(trigger),
    )
