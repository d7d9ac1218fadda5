"""Application dependency providers generators.

Service providers bind an advanced-alchemy service to the request's database session.
"""

from __future__ import annotations

from advanced_alchemy.extensions.litestar.providers import create_service_provider

__all__ = ("create_service_provider",)
