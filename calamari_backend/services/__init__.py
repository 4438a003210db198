"""Process-wide service instances."""
