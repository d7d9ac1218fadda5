"""Operator authentication for the administrative endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from litestar.exceptions import PermissionDeniedException
from litestar.security.jwt import JWTAuth, Token

from quotakeeper.config.base import get_settings

if TYPE_CHECKING:
    from litestar.connection import ASGIConnection
    from litestar.handlers.base import BaseRouteHandler

__all__ = (
    "OperatorClaims",
    "auth",
    "current_operator_from_token",
    "requires_admin",
)

settings = get_settings()


@dataclass(frozen=True, slots=True)
class OperatorClaims:
    """Capabilities asserted by the caller's credential."""

    subject: str
    is_admin: bool = False


async def current_operator_from_token(token: Token, connection: ASGIConnection[Any, Any, Any, Any]) -> OperatorClaims:
    """Build the operator claims from a verified access token.

    Args:
        token (str): JWT Token Object
        connection (ASGIConnection[Any, Any, Any, Any]): ASGI connection.

    Returns:
        OperatorClaims: the admin capability is only granted by an explicit ``admin: true`` claim.
    """
    return OperatorClaims(subject=token.sub, is_admin=token.extras.get("admin") is True)


def requires_admin(connection: ASGIConnection[OperatorClaims, Any, Any, Any], _: BaseRouteHandler) -> None:
    """Request requires an admin credential.

    Raises:
        PermissionDeniedException: Permission denied exception
    """
    if isinstance(connection.user, OperatorClaims) and connection.user.is_admin:
        return
    msg = "Unauthorized: admin access required"
    raise PermissionDeniedException(detail=msg)


auth = JWTAuth[OperatorClaims](
    retrieve_user_handler=current_operator_from_token,
    token_secret=settings.app.SECRET_KEY,
    algorithm=settings.app.JWT_ENCRYPTION_ALGORITHM,
    exclude=["/health", "/schema"],
)
