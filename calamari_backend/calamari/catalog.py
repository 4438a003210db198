"""Cluster catalog: maps cluster names to cluster fsids."""

import asyncio
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import List, Union
from uuid import UUID

from calamari_backend.calamari.errors import ClusterNotFound, DatastoreError
from calamari_backend.models.cluster import ClusterDescriptor

logger = logging.getLogger(__name__)


class ClusterCatalog:
    """SQLite-backed store of cluster descriptors.

    Each call opens its own connection and closes it before returning, so a
    catalog instance can be shared between threads and tasks.
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        """Initialize ClusterCatalog.

        Args:
            db_path: SQLite database file path
        """
        self.db_path = str(db_path)

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise DatastoreError(
                message=f"Cannot open cluster catalog: {e}",
                details={"db_path": self.db_path},
            ) from e
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the clusters table if it does not exist."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS clusters (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL UNIQUE,
                        cluster_id TEXT NOT NULL
                    )
                """)
        except sqlite3.Error as e:
            raise DatastoreError(message=f"Error initializing cluster catalog: {e}") from e
        logger.info(f"Cluster catalog initialized at {self.db_path}")

    def add_cluster(self, name: str, cluster_id: Union[UUID, str]) -> ClusterDescriptor:
        """Register a cluster.

        Raises:
            ValueError: If the name is taken or the id is not a UUID
            DatastoreError: On database failure
        """
        descriptor = ClusterDescriptor(name=name, cluster_id=UUID(str(cluster_id)))
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    "INSERT INTO clusters (name, cluster_id) VALUES (?, ?)",
                    (descriptor.name, str(descriptor.cluster_id)),
                )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Cluster '{name}' already exists") from e
        except sqlite3.Error as e:
            raise DatastoreError(message=f"Error adding cluster {name}: {e}") from e
        return descriptor

    def remove_cluster(self, name: str) -> bool:
        """Remove a cluster. Returns False if it was not registered."""
        try:
            with closing(self._connect()) as conn, conn:
                cursor = conn.execute("DELETE FROM clusters WHERE name = ?", (name,))
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise DatastoreError(message=f"Error removing cluster {name}: {e}") from e

    def list_clusters(self) -> List[ClusterDescriptor]:
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute("SELECT name, cluster_id FROM clusters ORDER BY name").fetchall()
        except sqlite3.Error as e:
            raise DatastoreError(message=f"Error listing clusters: {e}") from e
        try:
            return [ClusterDescriptor(name=row["name"], cluster_id=row["cluster_id"]) for row in rows]
        except ValueError as e:
            raise DatastoreError(message=f"Malformed cluster catalog entry: {e}") from e

    def lookup(self, cluster_name: str) -> str:
        """Return the fsid of a cluster by name.

        Raises:
            ClusterNotFound: If no cluster has that name
            DatastoreError: On database failure
        """
        try:
            with closing(self._connect()) as conn:
                row = conn.execute(
                    "SELECT cluster_id FROM clusters WHERE name = ?",
                    (cluster_name,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Cluster catalog lookup failed for {cluster_name}: {e}")
            raise DatastoreError(
                message=f"Error looking up cluster {cluster_name}: {e}",
                details={"cluster_name": cluster_name},
            ) from e

        if row is None:
            raise ClusterNotFound(cluster_name)
        try:
            return str(UUID(row["cluster_id"]))
        except ValueError as e:
            raise DatastoreError(
                message=f"Malformed cluster id for {cluster_name}: {row['cluster_id']!r}",
                details={"cluster_name": cluster_name},
            ) from e

    async def resolve(self, cluster_name: str) -> str:
        """Async variant of ``lookup`` that runs the query in a worker thread."""
        return await asyncio.to_thread(self.lookup, cluster_name)
