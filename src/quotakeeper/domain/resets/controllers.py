"""Usage Reset Controllers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any

from litestar import Controller, Request, get, post
from litestar.di import Provide
from litestar.params import Parameter

from quotakeeper.db import models as m
from quotakeeper.domain.accounts.guards import OperatorClaims, requires_admin
from quotakeeper.domain.resets import urls
from quotakeeper.domain.resets.deps import provide_reset_log_service
from quotakeeper.domain.resets.schemas import (
    ManualResetRequest,
    ManualResetResponse,
    ResetLogModel,
    ResetLogPartitionName,
)

if TYPE_CHECKING:
    from litestar.security.jwt import Token

    from quotakeeper.domain.resets.manual import ManualResetService
    from quotakeeper.domain.resets.services import ResetLogService


class UsageResetController(Controller):
    """Operator access to the usage reset jobs."""

    tags = ["Usage Resets"]
    dependencies = {"reset_log_service": Provide(provide_reset_log_service)}

    @post(operation_id="TriggerUsageReset", path=urls.RESETS_TRIGGER, status_code=200)
    async def trigger_reset(
        self,
        request: Request[OperatorClaims, Token, Any],
        data: ManualResetRequest,
        manual_reset_service: ManualResetService,
    ) -> ManualResetResponse:
        """Run a daily, weekly, monthly or all reset immediately."""
        claims = request.user if isinstance(request.user, OperatorClaims) else None
        result = await manual_reset_service.manual_reset(data.reset_type, claims)
        return ManualResetResponse.model_validate(result.to_dict())

    @get(operation_id="ListResetLogs", path=urls.RESETS_LOGS, guards=[requires_admin])
    async def list_reset_logs(
        self,
        reset_log_service: ResetLogService,
        partition: Annotated[ResetLogPartitionName, Parameter(query="partition")] = "daily",
        limit: Annotated[int, Parameter(query="limit", ge=1, le=200)] = 20,
    ) -> list[ResetLogModel]:
        """Most recent reset log entries of one partition."""
        entries = await reset_log_service.recent(m.ResetLogPartition(partition), limit=limit)
        return [ResetLogModel.model_validate(entry) for entry in entries]
