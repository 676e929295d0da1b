"""
Persistence layer for workflow definitions and runs.
"""

from .blobs import BlobStore, InMemoryBlobStore
from .postgres import PostgresBlobStore
from .repository import (
    WorkflowConfigRepository,
    RunStore,
    BlobWorkflowConfigRepository,
    BlobRunStore,
)

__all__ = [
    "BlobStore",
    "InMemoryBlobStore",
    "PostgresBlobStore",
    "WorkflowConfigRepository",
    "RunStore",
    "BlobWorkflowConfigRepository",
    "BlobRunStore",
]
