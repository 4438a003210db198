"""Pydantic models for pool endpoints."""

from typing import Any, Dict, Union

from pydantic import BaseModel, Field


class Pool(BaseModel):
    """A Ceph pool as reported by Calamari.

    Unknown fields are kept so that callers can read anything the server sends.
    """

    id: Union[int, None] = Field(None, description="Pool ID")
    name: str = Field(..., description="Pool name")
    size: Union[int, None] = Field(None, description="Replica count")
    min_size: Union[int, None] = Field(None, description="Minimum replicas for I/O")
    crush_ruleset: Union[int, None] = Field(None, description="CRUSH ruleset")
    pg_num: Union[int, None] = Field(None, description="Placement groups")
    pgp_num: Union[int, None] = Field(None, description="Placement groups for placement")
    quota_max_objects: Union[int, None] = Field(None, description="Object quota, 0 for none")
    quota_max_bytes: Union[int, None] = Field(None, description="Byte quota, 0 for none")

    model_config = {"extra": "allow"}


class CreatePoolRequest(BaseModel):
    """Request to create a pool."""

    mon: str = Field(..., min_length=1, description="Monitor host serving the Calamari API")
    cluster_name: str = Field(..., min_length=1, description="Cluster name in the catalog")
    name: str = Field(..., min_length=1, description="Pool name")
    pg_num: int = Field(..., ge=1, description="Placement group count")
    replicas: int = Field(..., ge=1, description="Replica count")
    quota_max_objects: int = Field(default=0, ge=0, description="Object quota, 0 for none")
    quota_max_bytes: int = Field(default=0, ge=0, description="Byte quota, 0 for none")

    def to_wire(self) -> Dict[str, Any]:
        """Body sent to Calamari for this pool."""
        return {
            "name": self.name,
            "size": self.replicas,
            "pg_num": self.pg_num,
            "pgp_num": self.pg_num,
            "quota_max_objects": self.quota_max_objects,
            "quota_max_bytes": self.quota_max_bytes,
        }
