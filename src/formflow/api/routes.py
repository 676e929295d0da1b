"""
REST API routes for workflow definitions and run history.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from ..core.errors import ConfigNotFoundError, RunNotFoundError
from ..models.run import RunStatus
from ..models.workflow import WorkflowConfig, WorkflowDefinitionInput
from ..orchestrator import RunOrchestrator
from ..persistence.repository import RunStore, WorkflowConfigRepository
from ..providers.catalog import ProviderCatalog
from .dependencies import get_catalog, get_configs, get_orchestrator, get_runs, get_tenant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["workflows"])


# Workflow Definitions

@router.get("/workflows")
async def list_workflows(
    tenant: str = Depends(get_tenant),
    configs: WorkflowConfigRepository = Depends(get_configs),
):
    """List workflow definitions, newest first."""
    return [c.to_document() for c in await configs.list(tenant)]


@router.post("/workflows", status_code=201)
async def create_workflow(
    definition: WorkflowDefinitionInput,
    tenant: str = Depends(get_tenant),
    configs: WorkflowConfigRepository = Depends(get_configs),
):
    """Create a new workflow definition."""
    config = WorkflowConfig.create(str(uuid.uuid4()), definition)
    await configs.put(config, tenant)
    logger.info(f"Created workflow {config.id} ({config.name}) for site {tenant}")
    return config.to_document()


@router.get("/workflows/{workflow_id}")
async def get_workflow(
    workflow_id: str,
    tenant: str = Depends(get_tenant),
    configs: WorkflowConfigRepository = Depends(get_configs),
):
    """Get a workflow definition by ID."""
    config = await configs.get(workflow_id, tenant)
    if not config:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return config.to_document()


@router.put("/workflows/{workflow_id}")
async def update_workflow(
    workflow_id: str,
    definition: WorkflowDefinitionInput,
    tenant: str = Depends(get_tenant),
    configs: WorkflowConfigRepository = Depends(get_configs),
):
    """Replace the editable fields of a workflow definition."""
    existing = await configs.get(workflow_id, tenant)
    if not existing:
        raise HTTPException(status_code=404, detail="Workflow not found")

    config = existing.replace(definition)
    await configs.put(config, tenant)
    return config.to_document()


@router.delete("/workflows/{workflow_id}")
async def delete_workflow(
    workflow_id: str,
    tenant: str = Depends(get_tenant),
    configs: WorkflowConfigRepository = Depends(get_configs),
):
    """Delete a workflow definition. Its runs are kept."""
    await configs.delete(workflow_id, tenant)
    return {"success": True}


# Runs

@router.get("/workflows/{workflow_id}/runs")
async def list_runs(
    workflow_id: str,
    status: Optional[RunStatus] = None,
    tenant: str = Depends(get_tenant),
    runs: RunStore = Depends(get_runs),
):
    """List runs of a workflow, newest first."""
    return [r.to_document() for r in await runs.list(workflow_id, tenant, status=status)]


@router.get("/workflows/{workflow_id}/runs/{run_id}")
async def get_run(
    workflow_id: str,
    run_id: str,
    tenant: str = Depends(get_tenant),
    runs: RunStore = Depends(get_runs),
):
    """Get a run by ID."""
    run = await runs.get(workflow_id, run_id, tenant)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    return run.to_document()


@router.post("/workflows/{workflow_id}/runs/{run_id}/retry", status_code=202)
async def retry_run(
    workflow_id: str,
    run_id: str,
    background_tasks: BackgroundTasks,
    tenant: str = Depends(get_tenant),
    orchestrator: RunOrchestrator = Depends(get_orchestrator),
):
    """Queue a new run with the same input and process it in the background."""
    try:
        run = await orchestrator.retry_run(workflow_id, run_id, tenant)
    except RunNotFoundError:
        raise HTTPException(status_code=404, detail="Run not found")

    background_tasks.add_task(orchestrator.run_in_background, workflow_id, run.id, tenant)
    return run.to_document()


@router.post("/workflows/{workflow_id}/runs/{run_id}/process")
async def process_run(
    workflow_id: str,
    run_id: str,
    tenant: str = Depends(get_tenant),
    orchestrator: RunOrchestrator = Depends(get_orchestrator),
):
    """Process a queued run synchronously and return its final state."""
    try:
        run = await orchestrator.start_run(workflow_id, run_id, tenant)
    except ConfigNotFoundError:
        raise HTTPException(status_code=404, detail="Workflow not found")
    except RunNotFoundError:
        raise HTTPException(status_code=404, detail="Run not found")
    return run.to_document()


# Providers

@router.get("/providers")
async def list_providers(catalog: ProviderCatalog = Depends(get_catalog)):
    """List the AI providers and models offered to workflow editors."""
    return await catalog.list()
