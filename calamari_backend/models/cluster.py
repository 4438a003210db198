"""Pydantic models for cluster-level data and Calamari request handles."""

from typing import Any, Dict, List, Union
from uuid import UUID

from pydantic import BaseModel, Field

PG_SEVERITIES = ("critical", "warn", "ok")


class ClusterDescriptor(BaseModel):
    """Cluster catalog entry."""

    name: str = Field(..., description="Cluster name")
    cluster_id: UUID = Field(..., description="Cluster fsid")


class AsyncJobHandle(BaseModel):
    """Body of a 202 Accepted response to a mutating request."""

    request_id: str = Field(..., min_length=1, description="Calamari request id")


class JobStatus(BaseModel):
    """Status of an asynchronous Calamari request."""

    state: str = Field(..., description="submitted, in-progress, complete, ...")
    error: bool = Field(default=False, description="True if the request failed")
    error_message: Union[str, None] = Field(default="", description="Failure reason")

    @property
    def complete(self) -> bool:
        return self.state == "complete"


class CommandResponse(BaseModel):
    """Result of a raw cluster command."""

    status: int = Field(..., description="Command exit status, 0 on success")
    out: str = Field(default="", description="Command stdout")
    error: str = Field(default="", description="Command stderr")


class PGSeverityCount(BaseModel):
    """Placement-group count for one severity bucket."""

    # JSON number only: no numeric strings, booleans, Infinity or NaN
    count: float = Field(
        ...,
        ge=0,
        strict=True,
        allow_inf_nan=False,
        description="Number of PGs in this bucket",
    )

    model_config = {"extra": "allow"}


class PGHealthCounters(BaseModel):
    """The ``pg`` section of the cluster health counters."""

    critical: PGSeverityCount
    warn: PGSeverityCount
    ok: PGSeverityCount

    model_config = {"extra": "allow"}

    def counts(self) -> Dict[str, int]:
        return {severity: int(getattr(self, severity).count) for severity in PG_SEVERITIES}


class ExecCmdRequest(BaseModel):
    """Request to run a raw cluster command."""

    command: str = Field(
        ...,
        min_length=1,
        description="Command line, split on whitespace (quoting is not supported)",
    )


class APIResponse(BaseModel):
    """Standard API response wrapper."""

    status: str = Field(..., description="Response status (success or error)")
    data: Any = Field(None, description="Response data")
    code: Union[str, None] = Field(None, description="Error code")
    message: Union[str, None] = Field(None, description="Error message")
    details: Union[Dict[str, Any], None] = Field(None, description="Additional details")


class ClusterListResponse(BaseModel):
    """Response model for the cluster catalog listing."""

    clusters: List[ClusterDescriptor] = Field(..., description="Known clusters")
    total: int = Field(..., description="Number of clusters")
