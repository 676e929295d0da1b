"""
Namespaced JSON document storage.

A blob store holds JSON documents under ``(namespace, key)``. Writes replace
the whole document. There is no versioning or compare-and-set: concurrent
writers to the same key race and the last one wins.
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class BlobStore(ABC):
    """Key/value store of JSON documents grouped by namespace."""

    @abstractmethod
    async def get_json(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        """Return the document at ``(namespace, key)`` or None."""
        pass

    @abstractmethod
    async def set_json(self, namespace: str, key: str, document: Dict[str, Any]) -> None:
        """Create or replace the document at ``(namespace, key)``."""
        pass

    @abstractmethod
    async def delete(self, namespace: str, key: str) -> None:
        """Delete the document if present."""
        pass

    @abstractmethod
    async def list_json(self, namespace: str) -> List[Dict[str, Any]]:
        """Return every document in ``namespace``."""
        pass


class InMemoryBlobStore(BlobStore):
    """
    Process-local blob store for tests and single-instance development.

    Documents are deep-copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self):
        self._namespaces: Dict[str, Dict[str, Dict[str, Any]]] = {}

    async def get_json(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        document = self._namespaces.get(namespace, {}).get(key)
        return copy.deepcopy(document) if document is not None else None

    async def set_json(self, namespace: str, key: str, document: Dict[str, Any]) -> None:
        self._namespaces.setdefault(namespace, {})[key] = copy.deepcopy(document)

    async def delete(self, namespace: str, key: str) -> None:
        self._namespaces.get(namespace, {}).pop(key, None)

    async def list_json(self, namespace: str) -> List[Dict[str, Any]]:
        return [copy.deepcopy(d) for d in self._namespaces.get(namespace, {}).values()]
