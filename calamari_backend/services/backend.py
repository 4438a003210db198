"""Shared Calamari backend used by the REST routers."""

from calamari_backend.calamari.backend import CalamariBackend
from calamari_backend.core.config import get_settings

# Global backend instance
backend = CalamariBackend.from_settings(get_settings())
