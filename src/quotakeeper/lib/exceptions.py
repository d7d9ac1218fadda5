"""Application exception hierarchy and its HTTP mapping."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from advanced_alchemy.exceptions import IntegrityError, NotFoundError, RepositoryError
from litestar.exceptions import (
    ClientException,
    HTTPException,
    InternalServerException,
    NotFoundException,
    PermissionDeniedException,
    TooManyRequestsException,
)
from litestar.exceptions.responses import create_debug_response, create_exception_response
from structlog.contextvars import bind_contextvars

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from litestar.connection import Request
    from litestar.middleware.exceptions.middleware import ExceptionResponseContent
    from litestar.response import Response
    from litestar.types import Scope

__all__ = (
    "ApplicationClientError",
    "ApplicationError",
    "AuthorizationError",
    "InvalidResetKindError",
    "QuotaExceededError",
    "after_exception_hook_handler",
    "exception_to_http_response",
)


class ApplicationError(Exception):
    """Base exception type for the lib's custom exception types."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``ApplicationError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ApplicationClientError(ApplicationError):
    """Base exception type for client errors."""


class AuthorizationError(ApplicationClientError):
    """A user tried to do something they shouldn't have."""

    detail = "Unauthorized: admin access required"


class InvalidResetKindError(ApplicationClientError):
    """Requested reset kind is not one of the supported values."""

    def __init__(self, reset_type: str) -> None:
        self.reset_type = reset_type
        super().__init__(detail=f"Invalid reset type: {reset_type!r}")


class QuotaExceededError(ApplicationClientError):
    """An account has used up the quota of one of its usage periods."""

    def __init__(
        self,
        *,
        user_id: UUID,
        period: str,
        current_usage: int,
        limit: int,
        reset_date: datetime,
    ) -> None:
        self.user_id = user_id
        self.period = period
        self.current_usage = current_usage
        self.limit = limit
        self.reset_date = reset_date
        super().__init__(
            detail=(
                f"{period.capitalize()} limit of {limit} requests reached "
                f"({current_usage} used). Quota resets at {reset_date.isoformat()}."
            ),
        )


class _HTTPConflictException(HTTPException):
    """Request conflict with the current state of the target resource."""

    status_code = 409


async def after_exception_hook_handler(exc: Exception, _scope: Scope) -> None:
    """Binds ``exc_info`` key with exception instance as value to structlog
    context vars.

    This must be a coroutine so that it is not wrapped in a thread where we'll lose context.

    Args:
        exc: the exception that was raised.
        _scope: scope of the request
    """
    if isinstance(exc, ApplicationError):
        return
    if isinstance(exc, HTTPException) and exc.status_code < 500:
        return
    bind_contextvars(exc_info=sys.exc_info())


def exception_to_http_response(
    request: Request[Any, Any, Any],
    exc: ApplicationError | RepositoryError,
) -> Response[ExceptionResponseContent]:
    """Transform repository exceptions to HTTP exceptions.

    Args:
        request: The request that experienced the exception.
        exc: Exception raised during handling of the request.

    Returns:
        Exception response appropriate to the type of original exception.
    """
    http_exc: type[HTTPException]
    if isinstance(exc, NotFoundError):
        http_exc = NotFoundException
    elif isinstance(exc, IntegrityError):
        http_exc = _HTTPConflictException
    elif isinstance(exc, AuthorizationError):
        http_exc = PermissionDeniedException
    elif isinstance(exc, QuotaExceededError):
        http_exc = TooManyRequestsException
    elif isinstance(exc, ApplicationClientError):
        http_exc = ClientException
    else:
        http_exc = InternalServerException
    if request.app.debug and http_exc not in (PermissionDeniedException, NotFoundException, TooManyRequestsException):
        return create_debug_response(request, exc)
    return create_exception_response(request, http_exc(detail=str(exc.detail)))
