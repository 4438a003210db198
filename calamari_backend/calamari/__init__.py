"""Calamari REST adapter."""

from calamari_backend.calamari.backend import CalamariBackend
from calamari_backend.calamari.catalog import ClusterCatalog
from calamari_backend.calamari.errors import (
    CalamariError,
    ClusterNotFound,
    CommandFailed,
    DatastoreError,
    DecodeError,
    EncodeError,
    JobFailed,
    JobTimeout,
    NotFoundError,
    OSDNotFound,
    ProgrammerError,
    RemoteError,
    SchemaError,
    TransportError,
)
from calamari_backend.calamari.routes import Route, RouteTable

__all__ = [
    "CalamariBackend",
    "CalamariError",
    "ClusterCatalog",
    "ClusterNotFound",
    "CommandFailed",
    "DatastoreError",
    "DecodeError",
    "EncodeError",
    "JobFailed",
    "JobTimeout",
    "NotFoundError",
    "OSDNotFound",
    "ProgrammerError",
    "RemoteError",
    "Route",
    "RouteTable",
    "SchemaError",
    "TransportError",
]
