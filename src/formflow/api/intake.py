"""
Public form intake endpoint.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from ..core.errors import ConfigNotFoundError
from ..orchestrator import RunOrchestrator
from .dependencies import get_form_relay, get_orchestrator, get_tenant

logger = logging.getLogger(__name__)

router = APIRouter(tags=["intake"])

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def _read_submission(request: Request) -> Dict[str, Any]:
    """Parse a JSON or form-encoded body. File uploads are ignored."""
    content_type = request.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            data = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Failed to parse request body")
        if not isinstance(data, dict):
            raise HTTPException(status_code=400, detail="Submission must be a JSON object")
        return data

    if any(t in content_type for t in FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    raise HTTPException(status_code=400, detail="Unsupported content type")


@router.post("/_aiwf/{workflow_id}")
async def submit_form(
    workflow_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    tenant: str = Depends(get_tenant),
    orchestrator: RunOrchestrator = Depends(get_orchestrator),
):
    """Accept a form submission and process it in the background."""
    config = await orchestrator.configs.get(workflow_id, tenant)
    if config is None:
        raise HTTPException(status_code=404, detail="Workflow not found")

    submission = await _read_submission(request)

    relay = get_form_relay()
    if config.form_name and relay is not None:
        await relay.relay(config.form_name, submission)

    try:
        run = await orchestrator.create_run(workflow_id, submission, tenant)
    except ConfigNotFoundError:
        raise HTTPException(status_code=404, detail="Workflow not found")

    background_tasks.add_task(orchestrator.run_in_background, workflow_id, run.id, tenant)

    if config.redirect_url:
        return RedirectResponse(config.redirect_url, status_code=303)

    return JSONResponse(
        status_code=202,
        content={
            "success": True,
            "runId": run.id,
            "message": "Form submitted successfully. Processing in background.",
        },
    )
