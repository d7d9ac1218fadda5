"""Reset health monitoring domain package."""
