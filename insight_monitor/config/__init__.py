"""Application configuration and static reference data."""
