"""Pool management endpoints."""

import logging
from typing import Annotated, Any, Dict, Union
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status

from calamari_backend.core.auth import AuthContext, require_pool_read, require_pool_write
from calamari_backend.core.exceptions import InvalidRequestError
from calamari_backend.core.logging import audit_logger
from calamari_backend.models.pool import CreatePoolRequest
from calamari_backend.services.backend import backend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["Pools"])

MonQuery = Annotated[str, Query(min_length=1, description="Monitor host serving the Calamari API")]


@router.post("/pools", status_code=status.HTTP_201_CREATED, response_model=Dict[str, Any])
async def create_pool(
    request: CreatePoolRequest,
    auth: Annotated[AuthContext, Depends(require_pool_write)],
) -> Dict[str, Any]:
    """Create a pool and wait until Calamari reports it complete."""
    logger.info(f"Creating pool {request.name} on cluster {request.cluster_name}")

    with audit_logger.track(
        "pool.create", auth.user, request.mon, request.cluster_name, request.to_wire()
    ):
        await backend.create_pool(
            request.name,
            request.mon,
            request.cluster_name,
            pg_num=request.pg_num,
            replicas=request.replicas,
            quota_max_objects=request.quota_max_objects,
            quota_max_bytes=request.quota_max_bytes,
        )

    return {
        "status": "success",
        "data": {"cluster_name": request.cluster_name, "pool": request.to_wire()},
    }


@router.get("/clusters/{cluster_id}/pools", response_model=Dict[str, Any])
async def list_pools(
    cluster_id: UUID,
    mon: MonQuery,
    auth: Annotated[AuthContext, Depends(require_pool_read)],
) -> Dict[str, Any]:
    """List the pools of a cluster."""
    pools = await backend.get_pools(mon, cluster_id)

    return {
        "status": "success",
        "data": {
            "pools": [pool.model_dump() for pool in pools],
            "total": len(pools),
        },
    }


@router.patch("/clusters/{cluster_id}/pools/{pool_id}", response_model=Dict[str, Any])
async def update_pool(
    cluster_id: UUID,
    pool_id: int,
    mon: MonQuery,
    params: Annotated[Dict[str, Any], Body(description="Pool attributes to change")],
    auth: Annotated[AuthContext, Depends(require_pool_write)],
) -> Dict[str, Any]:
    """Change pool attributes. The body is passed to Calamari unchanged."""
    if not params:
        raise InvalidRequestError("No pool attributes to update")

    with audit_logger.track(
        "pool.update", auth.user, mon, cluster_id, {"pool_id": pool_id, "params": params}
    ):
        await backend.update_pool(mon, cluster_id, pool_id, params)

    return {"status": "success", "data": {"pool_id": pool_id, "updated": params}}


@router.delete("/clusters/{cluster_id}/pools/{pool_id}", response_model=Dict[str, Any])
async def remove_pool(
    cluster_id: UUID,
    pool_id: int,
    mon: MonQuery,
    auth: Annotated[AuthContext, Depends(require_pool_write)],
    cluster_name: Union[str, None] = Query(None, description="Cluster name, for logging"),
    pool_name: Union[str, None] = Query(None, description="Pool name, for logging"),
) -> Dict[str, Any]:
    """Delete a pool."""
    details = {"pool_id": pool_id, "pool_name": pool_name, "cluster_name": cluster_name}
    with audit_logger.track("pool.delete", auth.user, mon, cluster_id, details):
        await backend.remove_pool(mon, cluster_id, cluster_name or "", pool_name or "", pool_id)

    return {"status": "success", "data": {"pool_id": pool_id, "deleted": True}}
