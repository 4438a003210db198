"""Pydantic models for OSD endpoints."""

from typing import List, Union

from pydantic import BaseModel, Field


class OSD(BaseModel):
    """An OSD as reported by Calamari. Unrecognised fields pass through."""

    id: int = Field(..., description="OSD ID")
    uuid: Union[str, None] = Field(None, description="OSD UUID")
    up: Union[bool, None] = Field(None, description="True if the OSD is up")
    in_: Union[bool, None] = Field(None, alias="in", description="True if the OSD is in")
    reweight: Union[float, None] = Field(None, description="Override weight")
    server: Union[str, None] = Field(None, description="Host the OSD runs on")
    pools: List[int] = Field(default_factory=list, description="Pools with PGs on this OSD")

    model_config = {"populate_by_name": True, "extra": "allow"}
