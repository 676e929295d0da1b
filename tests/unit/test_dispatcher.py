"""
Unit tests for action dispatch and the agent runner client.
"""
import json

import httpx
import pytest

from formflow.actions import ActionDispatcher, AgentRunnerClient
from formflow.core.errors import ActionDispatchError
from formflow.models import WorkflowAction

from conftest import TENANT, RecordingTrigger, bug_action


def always_action(action_id: str, template: str) -> WorkflowAction:
    return WorkflowAction(
        id=action_id,
        name=f"Action {action_id}",
        condition={"operator": "always"},
        prompt_template=template,
    )


class TestActionDispatcher:
    """Test condition gating and per-action isolation."""

    @pytest.mark.asyncio
    async def test_unmatched_condition_is_skipped(self, trigger):
        dispatcher = ActionDispatcher(trigger)

        results = await dispatcher.dispatch([bug_action()], {"email": "a@b.c"}, {"category": "feature"}, TENANT)

        assert len(results) == 1
        assert results[0].status == "skipped"
        assert results[0].action_id == "act-1"
        assert results[0].agent_runner_id is None
        assert trigger.calls == []

    @pytest.mark.asyncio
    async def test_matched_condition_triggers_with_rendered_prompt(self, trigger):
        dispatcher = ActionDispatcher(trigger)

        results = await dispatcher.dispatch([bug_action()], {"email": "a@b.c"}, {"category": "Bug"}, TENANT)

        assert results[0].status == "triggered"
        assert results[0].agent_runner_id == "r1"
        assert trigger.calls == [(TENANT, "Fix Bug reported by a@b.c")]

    @pytest.mark.asyncio
    async def test_failures_are_isolated_and_order_preserved(self):
        trigger = RecordingTrigger(fail_on=lambda instruction: instruction == "second")
        dispatcher = ActionDispatcher(trigger)
        actions = [
            always_action("a1", "first"),
            always_action("a2", "second"),
            always_action("a3", "third"),
        ]

        results = await dispatcher.dispatch(actions, {}, {}, TENANT)

        assert [r.action_id for r in results] == ["a1", "a2", "a3"]
        assert [r.status for r in results] == ["triggered", "error", "triggered"]
        assert results[1].error == "Failed to create agent runner: 500 boom"
        assert results[2].agent_runner_id == "r3"

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_error_result(self):
        class ExplodingTrigger(RecordingTrigger):
            async def trigger(self, tenant, instruction):
                raise RuntimeError("socket closed")

        results = await ActionDispatcher(ExplodingTrigger()).dispatch(
            [always_action("a1", "go")], {}, {}, TENANT
        )

        assert results[0].status == "error"
        assert results[0].error == "socket closed"

    @pytest.mark.asyncio
    async def test_no_actions(self, trigger):
        assert await ActionDispatcher(trigger).dispatch([], {}, {}, TENANT) == []


class TestAgentRunnerClient:
    """Test the agent runners API client."""

    @pytest.mark.asyncio
    async def test_creates_runner(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": "runner-9", "state": "new"})

        client = AgentRunnerClient(
            "https://api.example.test/api/v1/",
            api_token="tok",
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        runner_id = await client.trigger(TENANT, "Fix it")

        assert runner_id == "runner-9"
        request = seen[0]
        assert request.url.path == "/api/v1/agent_runners"
        assert request.url.params["site_id"] == TENANT
        assert request.headers["authorization"] == "Bearer tok"
        assert json.loads(request.content) == {"prompt": "Fix it"}

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status(self):
        client = AgentRunnerClient(
            "https://api.example.test/api/v1",
            api_token="tok",
            client=httpx.AsyncClient(transport=httpx.MockTransport(
                lambda request: httpx.Response(403, text="forbidden")
            )),
        )

        with pytest.raises(ActionDispatchError) as exc_info:
            await client.trigger(TENANT, "Fix it")

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Failed to create agent runner: 403 forbidden"

    @pytest.mark.asyncio
    async def test_response_without_id(self):
        client = AgentRunnerClient(
            "https://api.example.test/api/v1",
            api_token="tok",
            client=httpx.AsyncClient(transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"state": "new"})
            )),
        )

        with pytest.raises(ActionDispatchError, match="no id"):
            await client.trigger(TENANT, "Fix it")

    @pytest.mark.asyncio
    async def test_missing_token(self):
        client = AgentRunnerClient("https://api.example.test/api/v1")
        with pytest.raises(ActionDispatchError, match="token not configured"):
            await client.trigger(TENANT, "Fix it")
