"""Calamari storage backend for Ceph cluster management."""

__version__ = "1.0.0"
