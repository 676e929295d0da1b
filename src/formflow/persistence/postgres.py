"""
PostgreSQL-backed blob store.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import asyncpg

from .blobs import BlobStore

logger = logging.getLogger(__name__)


class PostgresBlobStore(BlobStore):
    """
    Blob store keeping JSON documents in a single JSONB table.

    Rows are keyed by ``(namespace, key)``; writes are upserts.
    """

    def __init__(self, pool: asyncpg.Pool, table: str = "formflow_blobs"):
        """
        Initialize store.

        Args:
            pool: Database connection pool
            table: Table name
        """
        self.pool = pool
        self.table = table

    async def init_tables(self):
        """Initialize database tables."""
        async with self.pool.acquire() as conn:
            await conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    namespace VARCHAR(512) NOT NULL,
                    key VARCHAR(255) NOT NULL,
                    document JSONB NOT NULL,
                    updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (namespace, key)
                )
            """)

            logger.info(f"Blob table {self.table} initialized")

    async def get_json(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT document FROM {self.table} WHERE namespace = $1 AND key = $2",
                namespace,
                key,
            )
            if row:
                return self._decode(row["document"])
            return None

    async def set_json(self, namespace: str, key: str, document: Dict[str, Any]) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(f"""
                INSERT INTO {self.table} (namespace, key, document, updated_at)
                VALUES ($1, $2, $3::jsonb, CURRENT_TIMESTAMP)
                ON CONFLICT (namespace, key)
                DO UPDATE SET document = EXCLUDED.document, updated_at = CURRENT_TIMESTAMP
            """,
                namespace,
                key,
                json.dumps(document),
            )

    async def delete(self, namespace: str, key: str) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"DELETE FROM {self.table} WHERE namespace = $1 AND key = $2",
                namespace,
                key,
            )

    async def list_json(self, namespace: str) -> List[Dict[str, Any]]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT document FROM {self.table} WHERE namespace = $1",
                namespace,
            )
            return [self._decode(row["document"]) for row in rows]

    @staticmethod
    def _decode(document: Any) -> Dict[str, Any]:
        # asyncpg returns JSONB as text unless a codec is registered
        if isinstance(document, str):
            return json.loads(document)
        return document
