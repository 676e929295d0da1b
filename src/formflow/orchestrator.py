"""
Run orchestration.

A run moves ``queued -> processing -> success | error``. The orchestrator
loads the workflow and run, marks the run processing, calls the AI gateway,
dispatches follow-on actions and records the terminal state.

Execution is best effort and single attempt. Nothing prevents two
orchestrations of the same run from racing; the last write wins. Retrying
creates a new run and leaves the original as an audit record.
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

from opentelemetry import trace

from .actions.dispatcher import ActionDispatcher
from .core.errors import ConfigNotFoundError, RunNotFoundError, WorkflowEngineError
from .models.run import RunStatus, RunUpdate, WorkflowRun
from .models.workflow import WorkflowConfig, utcnow
from .persistence.repository import RunStore, WorkflowConfigRepository
from .providers.gateway import AIGateway

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def new_run_id() -> str:
    return str(uuid.uuid4())


class RunOrchestrator:
    """Drives workflow runs through their lifecycle."""

    def __init__(
        self,
        configs: WorkflowConfigRepository,
        runs: RunStore,
        gateway: AIGateway,
        dispatcher: ActionDispatcher,
    ):
        self.configs = configs
        self.runs = runs
        self.gateway = gateway
        self.dispatcher = dispatcher

    async def create_run(
        self,
        workflow_id: str,
        input: Dict[str, Any],
        tenant: str,
    ) -> WorkflowRun:
        """
        Record a new submission as a queued run.

        Provider and model are copied from the current definition so later
        edits do not change what the run reports it used.

        Raises:
            ConfigNotFoundError: If the workflow does not exist
        """
        config = await self.configs.get(workflow_id, tenant)
        if config is None:
            raise ConfigNotFoundError(workflow_id)

        run = WorkflowRun.queued(new_run_id(), config, input)
        await self.runs.put(run, tenant)

        logger.info(f"Queued run {run.id} for workflow {workflow_id}")
        return run

    async def retry_run(self, workflow_id: str, run_id: str, tenant: str) -> WorkflowRun:
        """
        Create a queued copy of an existing run under a new id.

        The original run is not modified. The caller starts the new run.

        Raises:
            RunNotFoundError: If the run does not exist
        """
        original = await self.runs.get(workflow_id, run_id, tenant)
        if original is None:
            raise RunNotFoundError(workflow_id, run_id)

        retry = original.duplicate(new_run_id())
        await self.runs.put(retry, tenant)

        logger.info(
            f"Created retry {retry.id} of run {run_id} "
            f"(retry_count={retry.retry_count})"
        )
        return retry

    async def start_run(self, workflow_id: str, run_id: str, tenant: str) -> WorkflowRun:
        """
        Process a run to a terminal state.

        Provider, action and persistence failures are recorded on the run
        rather than raised.

        Returns:
            The run as last written

        Raises:
            ConfigNotFoundError: If the workflow does not exist
            RunNotFoundError: If the run does not exist
        """
        config, run = await asyncio.gather(
            self.configs.get(workflow_id, tenant),
            self.runs.get(workflow_id, run_id, tenant),
        )
        if config is None:
            raise ConfigNotFoundError(workflow_id)
        if run is None:
            raise RunNotFoundError(workflow_id, run_id)

        if run.is_terminal:
            logger.warning(f"Run {run_id} is already {run.status}, not reprocessing")
            return run

        with tracer.start_as_current_span("process_run") as span:
            span.set_attribute("workflow_id", workflow_id)
            span.set_attribute("run_id", run_id)
            span.set_attribute("provider", run.provider)
            span.set_attribute("model", run.model)

            run = await self._execute(config, run, tenant)

            span.set_attribute("status", run.status)
            return run

    async def run_in_background(self, workflow_id: str, run_id: str, tenant: str) -> None:
        """
        Entry point for background dispatch.

        Every failure, including a missing workflow or run, is logged and
        swallowed. A run that never starts stays queued until retried.
        """
        try:
            run = await self.start_run(workflow_id, run_id, tenant)
            logger.info(f"Background run {run_id} finished with status {run.status}")
        except WorkflowEngineError as e:
            logger.error(f"Background run {run_id} aborted: {e.message}")
        except Exception:
            logger.exception(f"Background run {run_id} crashed")

    async def _execute(
        self,
        config: WorkflowConfig,
        run: WorkflowRun,
        tenant: str,
    ) -> WorkflowRun:
        try:
            run = await self._save(
                run.apply(RunUpdate(status=RunStatus.PROCESSING, started_at=utcnow())),
                tenant,
            )

            output = await self.gateway.invoke(config, run.input)

            action_results = None
            if config.actions:
                action_results = await self.dispatcher.dispatch(
                    config.actions, run.input, output, tenant
                )

            update = RunUpdate(
                status=RunStatus.SUCCESS,
                output=output,
                action_results=action_results,
                completed_at=utcnow(),
            )
            logger.info(f"Run {run.id} completed successfully")

        except Exception as e:
            message = getattr(e, "message", None) or str(e) or e.__class__.__name__
            logger.error(f"Run {run.id} failed: {message}")
            update = RunUpdate(
                status=RunStatus.ERROR,
                error=message,
                completed_at=utcnow(),
            )

        final = run.apply(update)
        try:
            return await self._save(final, tenant)
        except Exception:
            logger.exception(f"Failed to persist final state of run {run.id}")
            return final

    async def _save(self, run: WorkflowRun, tenant: str) -> WorkflowRun:
        await self.runs.put(run, tenant)
        return run
