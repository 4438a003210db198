"""Cluster-level endpoints: catalog, placement groups and raw commands."""

import asyncio
import logging
from typing import Annotated, Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from calamari_backend.core.auth import (
    AuthContext,
    require_cluster_read,
    require_cluster_write,
)
from calamari_backend.core.exceptions import InvalidRequestError
from calamari_backend.core.logging import audit_logger
from calamari_backend.models.cluster import ClusterListResponse, ExecCmdRequest
from calamari_backend.services.backend import backend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["Cluster"])

MonQuery = Annotated[str, Query(min_length=1, description="Monitor host serving the Calamari API")]


@router.get("/clusters", response_model=Dict[str, Any])
async def list_clusters(
    auth: Annotated[AuthContext, Depends(require_cluster_read)],
) -> Dict[str, Any]:
    """List clusters registered in the catalog."""
    clusters = await asyncio.to_thread(backend.catalog.list_clusters)
    response = ClusterListResponse(clusters=clusters, total=len(clusters))

    return {"status": "success", "data": response.model_dump(mode="json")}


@router.get("/clusters/{cluster_name}/id", response_model=Dict[str, Any])
async def resolve_cluster(
    cluster_name: str,
    auth: Annotated[AuthContext, Depends(require_cluster_read)],
) -> Dict[str, Any]:
    """Resolve a cluster name to its fsid."""
    cluster_id = await backend.catalog.resolve(cluster_name)

    return {"status": "success", "data": {"name": cluster_name, "cluster_id": cluster_id}}


@router.get("/clusters/{cluster_id}/pg/count", response_model=Dict[str, Any])
async def get_pg_count(
    cluster_id: UUID,
    mon: MonQuery,
    auth: Annotated[AuthContext, Depends(require_cluster_read)],
) -> Dict[str, Any]:
    """Placement-group counts per health severity."""
    counts = await backend.get_pg_count(mon, cluster_id)

    return {"status": "success", "data": counts}


@router.get("/clusters/{cluster_id}/pg/summary", response_model=Dict[str, Any])
async def get_pg_summary(
    cluster_id: UUID,
    mon: MonQuery,
    auth: Annotated[AuthContext, Depends(require_cluster_read)],
) -> Dict[str, Any]:
    """Placement-group summary as reported by Calamari."""
    summary = await backend.get_pg_summary(mon, cluster_id)

    return {"status": "success", "data": summary}


@router.post("/clusters/{cluster_id}/cli", response_model=Dict[str, Any])
async def exec_cmd(
    cluster_id: UUID,
    mon: MonQuery,
    request: ExecCmdRequest,
    auth: Annotated[AuthContext, Depends(require_cluster_write)],
) -> Dict[str, Any]:
    """Run a raw ceph command on the cluster."""
    try:
        with audit_logger.track(
            "cluster.exec", auth.user, mon, cluster_id, {"command": request.command}
        ):
            _, out = await backend.exec_cmd(mon, cluster_id, request.command)
    except ValueError as e:
        raise InvalidRequestError(str(e), {"command": request.command}) from e

    return {"status": "success", "data": {"command": request.command, "out": out}}
