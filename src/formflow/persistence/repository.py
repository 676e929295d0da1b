"""
Repositories for workflow definitions and runs.

Every operation takes the tenant explicitly; nothing is scoped by ambient
state. Definitions live in namespace ``aiwf-configs:<tenant>`` and runs in
``aiwf-runs:<tenant>:<workflow_id>``.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import ValidationError

from ..models.run import RunStatus, WorkflowRun
from ..models.workflow import WorkflowConfig
from .blobs import BlobStore

logger = logging.getLogger(__name__)

CONFIGS_NAMESPACE = "aiwf-configs"
RUNS_NAMESPACE = "aiwf-runs"


def configs_namespace(tenant: str) -> str:
    return f"{CONFIGS_NAMESPACE}:{tenant}"


def runs_namespace(tenant: str, workflow_id: str) -> str:
    return f"{RUNS_NAMESPACE}:{tenant}:{workflow_id}"


class WorkflowConfigRepository(ABC):
    """Durable store of workflow definitions keyed by (tenant, workflow)."""

    @abstractmethod
    async def get(self, workflow_id: str, tenant: str) -> Optional[WorkflowConfig]:
        pass

    @abstractmethod
    async def put(self, config: WorkflowConfig, tenant: str) -> None:
        pass

    @abstractmethod
    async def delete(self, workflow_id: str, tenant: str) -> None:
        pass

    @abstractmethod
    async def list(self, tenant: str) -> List[WorkflowConfig]:
        """Definitions for the tenant, newest first."""
        pass


class RunStore(ABC):
    """Durable store of runs keyed by (tenant, workflow, run)."""

    @abstractmethod
    async def get(self, workflow_id: str, run_id: str, tenant: str) -> Optional[WorkflowRun]:
        pass

    @abstractmethod
    async def put(self, run: WorkflowRun, tenant: str) -> None:
        """Full-document replace keyed by run id."""
        pass

    @abstractmethod
    async def list(
        self,
        workflow_id: str,
        tenant: str,
        status: Optional[RunStatus] = None,
    ) -> List[WorkflowRun]:
        """Runs of a workflow, newest first, optionally filtered by status."""
        pass


class BlobWorkflowConfigRepository(WorkflowConfigRepository):
    """Workflow definitions stored as JSON documents in a blob store."""

    def __init__(self, store: BlobStore):
        self.store = store

    async def get(self, workflow_id: str, tenant: str) -> Optional[WorkflowConfig]:
        document = await self.store.get_json(configs_namespace(tenant), workflow_id)
        if document is None:
            return None
        return WorkflowConfig.model_validate(document)

    async def put(self, config: WorkflowConfig, tenant: str) -> None:
        await self.store.set_json(configs_namespace(tenant), config.id, config.to_document())

    async def delete(self, workflow_id: str, tenant: str) -> None:
        await self.store.delete(configs_namespace(tenant), workflow_id)

    async def list(self, tenant: str) -> List[WorkflowConfig]:
        configs = []
        for document in await self.store.list_json(configs_namespace(tenant)):
            try:
                configs.append(WorkflowConfig.model_validate(document))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable workflow document {document.get('id')}: {e}")

        return sorted(configs, key=lambda c: c.created_at, reverse=True)


class BlobRunStore(RunStore):
    """Runs stored as JSON documents in a blob store."""

    def __init__(self, store: BlobStore):
        self.store = store

    async def get(self, workflow_id: str, run_id: str, tenant: str) -> Optional[WorkflowRun]:
        document = await self.store.get_json(runs_namespace(tenant, workflow_id), run_id)
        if document is None:
            return None
        return WorkflowRun.model_validate(document)

    async def put(self, run: WorkflowRun, tenant: str) -> None:
        await self.store.set_json(
            runs_namespace(tenant, run.workflow_id),
            run.id,
            run.to_document(),
        )

    async def list(
        self,
        workflow_id: str,
        tenant: str,
        status: Optional[RunStatus] = None,
    ) -> List[WorkflowRun]:
        runs = []
        for document in await self.store.list_json(runs_namespace(tenant, workflow_id)):
            try:
                run = WorkflowRun.model_validate(document)
            except ValidationError as e:
                logger.warning(f"Skipping unreadable run document {document.get('id')}: {e}")
                continue
            if status is None or run.status == status:
                runs.append(run)

        return sorted(runs, key=lambda r: r.created_at, reverse=True)
