"""API routers."""

from calamari_backend.routers import cluster, osd, pool

__all__ = ["cluster", "osd", "pool"]
