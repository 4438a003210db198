"""Pydantic models for request/response validation and Calamari payloads."""

from calamari_backend.models.cluster import (
    APIResponse,
    AsyncJobHandle,
    ClusterDescriptor,
    ClusterListResponse,
    CommandResponse,
    ExecCmdRequest,
    JobStatus,
    PGHealthCounters,
    PGSeverityCount,
)
from calamari_backend.models.osd import OSD
from calamari_backend.models.pool import CreatePoolRequest, Pool

__all__ = [
    "APIResponse",
    "AsyncJobHandle",
    "ClusterDescriptor",
    "ClusterListResponse",
    "CommandResponse",
    "CreatePoolRequest",
    "ExecCmdRequest",
    "JobStatus",
    "OSD",
    "PGHealthCounters",
    "PGSeverityCount",
    "Pool",
]
