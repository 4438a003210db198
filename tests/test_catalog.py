"""Tests for the cluster catalog."""

import sqlite3
from unittest.mock import MagicMock, patch

import pytest

from calamari_backend.calamari.catalog import ClusterCatalog
from calamari_backend.calamari.errors import ClusterNotFound, DatastoreError, NotFoundError

from conftest import CLUSTER_ID

OTHER_ID = "11111111-2222-3333-4444-555555555555"


class TestClusterCatalog:
    """Tests for ClusterCatalog."""

    def test_lookup(self, catalog: ClusterCatalog) -> None:
        assert catalog.lookup("c1") == CLUSTER_ID

    def test_lookup_not_found(self, catalog: ClusterCatalog) -> None:
        """Test an unknown name raises ClusterNotFound."""
        with pytest.raises(ClusterNotFound) as exc_info:
            catalog.lookup("missing")

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.status_code == 404
        assert exc_info.value.details["cluster_name"] == "missing"

    @pytest.mark.asyncio
    async def test_resolve(self, catalog: ClusterCatalog) -> None:
        assert await catalog.resolve("c1") == CLUSTER_ID

    @pytest.mark.asyncio
    async def test_resolve_not_found(self, catalog: ClusterCatalog) -> None:
        with pytest.raises(ClusterNotFound):
            await catalog.resolve("missing")

    def test_add_and_list(self, catalog: ClusterCatalog) -> None:
        """Test clusters are listed by name."""
        catalog.add_cluster("a-cluster", OTHER_ID)

        clusters = catalog.list_clusters()

        assert [c.name for c in clusters] == ["a-cluster", "c1"]
        assert str(clusters[0].cluster_id) == OTHER_ID

    def test_add_duplicate(self, catalog: ClusterCatalog) -> None:
        with pytest.raises(ValueError, match="already exists"):
            catalog.add_cluster("c1", OTHER_ID)

    def test_add_invalid_id(self, catalog: ClusterCatalog) -> None:
        """Test a cluster id must be a UUID."""
        with pytest.raises(ValueError):
            catalog.add_cluster("c2", "not-a-uuid")

        assert [c.name for c in catalog.list_clusters()] == ["c1"]

    def test_remove(self, catalog: ClusterCatalog) -> None:
        assert catalog.remove_cluster("c1") is True
        assert catalog.remove_cluster("c1") is False
        assert catalog.list_clusters() == []

    def test_init_db_creates_directory(self, tmp_path) -> None:
        catalog = ClusterCatalog(tmp_path / "nested" / "dir" / "clusters.db")

        catalog.init_db()
        catalog.init_db()

        assert (tmp_path / "nested" / "dir" / "clusters.db").exists()
        assert catalog.list_clusters() == []

    def test_uninitialized_catalog(self, tmp_path) -> None:
        """Test querying a catalog without its table is a datastore error."""
        catalog = ClusterCatalog(tmp_path / "empty.db")

        with pytest.raises(DatastoreError) as exc_info:
            catalog.lookup("c1")

        assert exc_info.value.status_code == 503

    def test_unreachable_database(self, tmp_path) -> None:
        catalog = ClusterCatalog(tmp_path / "missing-dir" / "clusters.db")

        with pytest.raises(DatastoreError):
            catalog.lookup("c1")

    def test_malformed_cluster_id(self, catalog: ClusterCatalog) -> None:
        """Test a corrupt cluster id row is a datastore error, not a ValueError leak."""
        conn = sqlite3.connect(catalog.db_path)
        conn.execute("INSERT INTO clusters (name, cluster_id) VALUES ('bad', 'not-a-uuid')")
        conn.commit()
        conn.close()

        with pytest.raises(DatastoreError) as exc_info:
            catalog.lookup("bad")

        assert exc_info.value.status_code == 503
        assert exc_info.value.details["cluster_name"] == "bad"
        assert catalog.lookup("c1") == CLUSTER_ID

        with pytest.raises(DatastoreError):
            catalog.list_clusters()

    def test_connection_closed_on_error(self, catalog: ClusterCatalog) -> None:
        """Test the connection is released when a query fails."""
        conn = MagicMock()
        conn.execute.side_effect = sqlite3.OperationalError("disk I/O error")

        with patch.object(catalog, "_connect", return_value=conn):
            with pytest.raises(DatastoreError):
                catalog.lookup("c1")

        conn.close.assert_called_once()

    def test_connection_closed_on_not_found(self, catalog: ClusterCatalog) -> None:
        conn = MagicMock()
        conn.execute.return_value.fetchone.return_value = None

        with patch.object(catalog, "_connect", return_value=conn):
            with pytest.raises(ClusterNotFound):
                catalog.lookup("c1")

        conn.close.assert_called_once()
