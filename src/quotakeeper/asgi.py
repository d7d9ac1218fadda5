# pylint: disable=[invalid-name,import-outside-toplevel]
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from litestar import Litestar


def create_app() -> Litestar:
    """Create ASGI application."""

    from litestar import Litestar

    from quotakeeper.server.core import ApplicationCore
    from quotakeeper.server.plugins import pydantic

    return Litestar(plugins=[ApplicationCore(), pydantic])
