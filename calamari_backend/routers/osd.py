"""OSD management endpoints."""

import logging
from typing import Annotated, Any, Dict
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query

from calamari_backend.core.auth import AuthContext, require_osd_read, require_osd_write
from calamari_backend.core.exceptions import InvalidRequestError
from calamari_backend.core.logging import audit_logger
from calamari_backend.services.backend import backend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["OSD"])

MonQuery = Annotated[str, Query(min_length=1, description="Monitor host serving the Calamari API")]


@router.get("/clusters/{cluster_id}/osds", response_model=Dict[str, Any])
async def list_osds(
    cluster_id: UUID,
    mon: MonQuery,
    auth: Annotated[AuthContext, Depends(require_osd_read)],
) -> Dict[str, Any]:
    """List the OSDs of a cluster."""
    osds = await backend.get_osds(mon, cluster_id)

    return {
        "status": "success",
        "data": {
            "osds": [osd.model_dump(by_alias=True) for osd in osds],
            "total": len(osds),
        },
    }


@router.get("/clusters/{cluster_id}/osds/{osd_id}", response_model=Dict[str, Any])
async def get_osd(
    cluster_id: UUID,
    osd_id: int,
    mon: MonQuery,
    auth: Annotated[AuthContext, Depends(require_osd_read)],
) -> Dict[str, Any]:
    """Get a single OSD."""
    osd = await backend.get_osd(mon, cluster_id, osd_id)

    return {"status": "success", "data": osd.model_dump(by_alias=True)}


@router.patch("/clusters/{cluster_id}/osds/{osd_id}", response_model=Dict[str, Any])
async def update_osd(
    cluster_id: UUID,
    osd_id: int,
    mon: MonQuery,
    params: Annotated[Dict[str, Any], Body(description="OSD attributes to change, e.g. {\"in\": false}")],
    auth: Annotated[AuthContext, Depends(require_osd_write)],
) -> Dict[str, Any]:
    """Change OSD attributes. The body is passed to Calamari unchanged."""
    if not params:
        raise InvalidRequestError("No OSD attributes to update")

    with audit_logger.track(
        "osd.update", auth.user, mon, cluster_id, {"osd_id": osd_id, "params": params}
    ):
        await backend.update_osd(mon, cluster_id, osd_id, params)

    return {"status": "success", "data": {"osd_id": osd_id, "updated": params}}
