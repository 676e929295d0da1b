"""
Integration tests for the formflow HTTP API.

The app runs in-process through FastAPI's TestClient with stubbed vendors and
in-memory storage. Background tasks run before the client call returns, so a
submission's run is terminal by the time the test inspects it.
"""
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from formflow.api import FormRelay, intake_router, router, set_dependencies
from formflow.providers import ProviderCatalog

from conftest import TENANT, anthropic_body


def definition(**overrides):
    data = {
        "name": "Contact triage",
        "inputFields": ["msg", "email"],
        "prompt": "Classify: {{msg}}",
        "outputSchema": {
            "type": "object",
            "properties": {"category": {"type": "string", "enum": ["bug", "feature"]}},
            "required": ["category"],
        },
        "provider": "anthropic",
        "model": "claude-sonnet-4-20250514",
        "actions": [
            {
                "id": "act-1",
                "name": "File bug",
                "type": "trigger-side-effect",
                "condition": {"field": "category", "operator": "equals", "value": "bug"},
                "promptTemplate": "Fix {{output.category}} reported by {{email}}",
            }
        ],
    }
    data.update(overrides)
    return data


class RelayRecorder:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text="ok")


@pytest.fixture
def relay_recorder():
    return RelayRecorder()


@pytest.fixture
def client(orchestrator, relay_recorder):
    relay = FormRelay(
        "https://site.test/",
        client=httpx.AsyncClient(transport=httpx.MockTransport(relay_recorder.handler)),
    )
    set_dependencies(orchestrator, form_relay=relay, default_tenant="default")

    app = FastAPI()
    app.include_router(intake_router)
    app.include_router(router)

    with TestClient(app, follow_redirects=False, headers={"X-Site-Id": TENANT}) as test_client:
        yield test_client


def create_workflow(client, **overrides) -> str:
    response = client.post("/api/v1/workflows", json=definition(**overrides))
    assert response.status_code == 201
    return response.json()["id"]


class TestWorkflowCrud:
    """Test workflow definition management."""

    def test_create_and_get(self, client):
        workflow_id = create_workflow(client)

        response = client.get(f"/api/v1/workflows/{workflow_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Contact triage"
        assert body["outputSchema"]["properties"]["category"]["enum"] == ["bug", "feature"]
        assert body["actions"][0]["promptTemplate"].startswith("Fix")
        assert "createdAt" in body

    def test_create_rejects_missing_fields(self, client):
        response = client.post("/api/v1/workflows", json={"name": "x"})
        assert response.status_code == 422

    def test_update_keeps_identity(self, client):
        workflow_id = create_workflow(client)
        created = client.get(f"/api/v1/workflows/{workflow_id}").json()

        response = client.put(
            f"/api/v1/workflows/{workflow_id}",
            json=definition(name="Renamed", provider="openai", model="gpt-4o"),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == workflow_id
        assert body["name"] == "Renamed"
        assert body["createdAt"] == created["createdAt"]

    def test_numeric_condition_value_accepted(self, client):
        action = definition()["actions"][0]
        action = {**action, "condition": {"field": "score", "operator": "equals", "value": 5}}

        response = client.post("/api/v1/workflows", json=definition(actions=[action]))

        assert response.status_code == 201
        assert response.json()["actions"][0]["condition"]["value"] == "5"

    def test_update_unknown(self, client):
        response = client.put("/api/v1/workflows/nope", json=definition())
        assert response.status_code == 404

    def test_list_and_delete(self, client):
        workflow_id = create_workflow(client)

        assert [w["id"] for w in client.get("/api/v1/workflows").json()] == [workflow_id]

        assert client.delete(f"/api/v1/workflows/{workflow_id}").json() == {"success": True}
        assert client.get(f"/api/v1/workflows/{workflow_id}").status_code == 404

    def test_tenant_header_scopes_workflows(self, client):
        workflow_id = create_workflow(client)

        response = client.get(f"/api/v1/workflows/{workflow_id}", headers={"X-Site-Id": "other-site"})

        assert response.status_code == 404


class TestIntake:
    """Test the public submission endpoint."""

    def test_json_submission_is_processed(self, client, provider_stub, trigger):
        workflow_id = create_workflow(client)
        provider_stub.reply(anthropic_body('```json\n{"category": "bug"}\n```'))

        response = client.post(f"/_aiwf/{workflow_id}", json={"msg": "it crashes", "email": "a@b.c"})

        assert response.status_code == 202
        body = response.json()
        assert body["success"] is True
        run_id = body["runId"]

        run = client.get(f"/api/v1/workflows/{workflow_id}/runs/{run_id}").json()
        assert run["status"] == "success"
        assert run["output"] == {"category": "bug"}
        assert run["actionResults"][0]["status"] == "triggered"
        assert run["actionResults"][0]["agentRunnerId"] == "r1"
        assert trigger.calls == [(TENANT, "Fix bug reported by a@b.c")]

    def test_form_submission_redirects(self, client, provider_stub):
        workflow_id = create_workflow(client, redirectUrl="https://site.test/thanks")
        provider_stub.reply(anthropic_body('{"category": "feature"}'))

        response = client.post(f"/_aiwf/{workflow_id}", data={"msg": "add dark mode"})

        assert response.status_code == 303
        assert response.headers["location"] == "https://site.test/thanks"

        runs = client.get(f"/api/v1/workflows/{workflow_id}/runs").json()
        assert len(runs) == 1
        assert runs[0]["input"] == {"msg": "add dark mode"}
        assert runs[0]["actionResults"][0]["status"] == "skipped"

    def test_unknown_workflow(self, client):
        response = client.post("/_aiwf/nope", json={"msg": "x"})
        assert response.status_code == 404

    def test_unsupported_content_type(self, client):
        workflow_id = create_workflow(client)

        response = client.post(
            f"/_aiwf/{workflow_id}",
            content=b"msg=x",
            headers={"Content-Type": "text/plain"},
        )

        assert response.status_code == 400

    def test_non_object_json(self, client):
        workflow_id = create_workflow(client)
        response = client.post(f"/_aiwf/{workflow_id}", json=["a", "b"])
        assert response.status_code == 400

    def test_provider_failure_is_recorded(self, client, provider_stub):
        workflow_id = create_workflow(client)
        provider_stub.reply_text("overloaded", status_code=529)

        run_id = client.post(f"/_aiwf/{workflow_id}", json={"msg": "x"}).json()["runId"]

        run = client.get(f"/api/v1/workflows/{workflow_id}/runs/{run_id}").json()
        assert run["status"] == "error"
        assert "529" in run["error"]
        assert "output" not in run

    def test_form_name_relays_submission(self, client, provider_stub, relay_recorder):
        workflow_id = create_workflow(client, formName="contact")
        provider_stub.reply(anthropic_body('{"category": "feature"}'))

        client.post(f"/_aiwf/{workflow_id}", json={"msg": "hello"})

        assert len(relay_recorder.requests) == 1
        relayed = parse_qs(relay_recorder.requests[0].content.decode())
        assert relayed == {"form-name": ["contact"], "msg": ["hello"]}

    def test_no_form_name_no_relay(self, client, provider_stub, relay_recorder):
        workflow_id = create_workflow(client)
        provider_stub.reply(anthropic_body('{"category": "feature"}'))

        client.post(f"/_aiwf/{workflow_id}", json={"msg": "hello"})

        assert relay_recorder.requests == []


class TestRuns:
    """Test run history, retry and synchronous processing."""

    def test_retry_creates_new_run(self, client, provider_stub):
        workflow_id = create_workflow(client)
        provider_stub.reply_text("boom", status_code=500)
        provider_stub.reply(anthropic_body('{"category": "bug"}'))
        run_id = client.post(f"/_aiwf/{workflow_id}", json={"msg": "x"}).json()["runId"]

        response = client.post(f"/api/v1/workflows/{workflow_id}/runs/{run_id}/retry")

        assert response.status_code == 202
        retry = response.json()
        assert retry["id"] != run_id
        assert retry["retryCount"] == 1
        assert retry["status"] == "queued"

        stored = client.get(f"/api/v1/workflows/{workflow_id}/runs/{retry['id']}").json()
        assert stored["status"] == "success"
        original = client.get(f"/api/v1/workflows/{workflow_id}/runs/{run_id}").json()
        assert original["status"] == "error"

    def test_retry_unknown_run(self, client):
        workflow_id = create_workflow(client)
        response = client.post(f"/api/v1/workflows/{workflow_id}/runs/nope/retry")
        assert response.status_code == 404

    def test_list_filters_by_status(self, client, provider_stub):
        workflow_id = create_workflow(client)
        provider_stub.reply_text("boom", status_code=500)
        provider_stub.reply(anthropic_body('{"category": "bug"}'))
        client.post(f"/_aiwf/{workflow_id}", json={"msg": "1"})
        client.post(f"/_aiwf/{workflow_id}", json={"msg": "2"})

        failed = client.get(f"/api/v1/workflows/{workflow_id}/runs", params={"status": "error"}).json()

        assert [r["input"]["msg"] for r in failed] == ["1"]
        assert len(client.get(f"/api/v1/workflows/{workflow_id}/runs").json()) == 2

    def test_invalid_status_filter(self, client):
        workflow_id = create_workflow(client)
        response = client.get(f"/api/v1/workflows/{workflow_id}/runs", params={"status": "done"})
        assert response.status_code == 422

    def test_process_terminal_run_returns_it_unchanged(self, client, provider_stub):
        workflow_id = create_workflow(client)
        provider_stub.reply(anthropic_body('{"category": "bug"}'))
        run_id = client.post(f"/_aiwf/{workflow_id}", json={"msg": "x"}).json()["runId"]

        response = client.post(f"/api/v1/workflows/{workflow_id}/runs/{run_id}/process")

        assert response.status_code == 200
        assert response.json()["status"] == "success"
        assert len(provider_stub.requests) == 1

    def test_process_unknown(self, client):
        assert client.post("/api/v1/workflows/nope/runs/x/process").status_code == 404
        workflow_id = create_workflow(client)
        assert client.post(f"/api/v1/workflows/{workflow_id}/runs/x/process").status_code == 404

    def test_get_unknown_run(self, client):
        response = client.get("/api/v1/workflows/wf/runs/missing")
        assert response.status_code == 404


class TestProviders:
    """Test the provider catalog."""

    def test_lists_supported_providers(self, client):
        providers = client.get("/api/v1/providers").json()
        assert [p["id"] for p in providers] == ["anthropic", "openai", "google"]
        assert all(p["models"] for p in providers)

    def test_serves_live_catalog(self, client, orchestrator):
        def handler(request):
            return httpx.Response(200, json={"providers": {"openai": {"models": ["gpt-4o"]}}})

        catalog = ProviderCatalog(
            orchestrator.gateway.registry,
            catalog_url="https://gateway.test/providers",
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        set_dependencies(orchestrator, default_tenant="default", catalog=catalog)

        response = client.get("/api/v1/providers")

        assert response.json() == [{"id": "openai", "name": "OpenAI", "models": ["gpt-4o"]}]


class TestServiceApp:
    """Test the assembled service application."""

    def test_health(self):
        from formflow.main import app

        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_routes_registered(self):
        from formflow.main import app

        paths = app.openapi()["paths"]
        assert "post" in paths["/_aiwf/{workflow_id}"]
        assert "post" in paths["/api/v1/workflows/{workflow_id}/runs/{run_id}/retry"]
        assert "get" in paths["/api/v1/providers"]
