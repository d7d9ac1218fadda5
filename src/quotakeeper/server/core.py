# pylint: disable=[invalid-name,import-outside-toplevel]
from __future__ import annotations

from typing import TYPE_CHECKING

from litestar.openapi.config import OpenAPIConfig
from litestar.openapi.plugins import ScalarRenderPlugin
from litestar.plugins import CLIPluginProtocol, InitPluginProtocol

if TYPE_CHECKING:
    from click import Group
    from litestar.config.app import AppConfig


class ApplicationCore(InitPluginProtocol, CLIPluginProtocol):
    """Application core configuration plugin.

    This class is responsible for configuring the main Litestar application with our routes, guards, and various plugins

    """

    __slots__ = "app_slug"
    app_slug: str

    def on_cli_init(self, cli: Group) -> None:
        from quotakeeper.cli.commands import quota_management_group
        from quotakeeper.config import get_settings

        settings = get_settings()
        self.app_slug = settings.app.slug
        cli.add_command(quota_management_group)

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Configure application for use with SQLAlchemy.

        Args:
            app_config: The :class:`AppConfig <litestar.config.app.AppConfig>` instance.
        """

        from uuid import UUID

        from advanced_alchemy.exceptions import RepositoryError
        from litestar.di import Provide
        from litestar.security.jwt import Token
        from sqlalchemy.ext.asyncio import AsyncSession

        from quotakeeper.__about__ import __version__ as current_version
        from quotakeeper.config import app as config
        from quotakeeper.config import get_settings
        from quotakeeper.db import models as m
        from quotakeeper.domain.accounts.guards import OperatorClaims
        from quotakeeper.domain.accounts.guards import auth as jwt_auth
        from quotakeeper.domain.resets.controllers import UsageResetController
        from quotakeeper.domain.resets.deps import provide_manual_reset_service
        from quotakeeper.domain.resets.manual import ManualResetService
        from quotakeeper.domain.resets.services import QuotaConfigService, ResetLogService
        from quotakeeper.domain.system.controllers import SystemController
        from quotakeeper.domain.usage.controllers import UsageAdminController, UsageController
        from quotakeeper.domain.usage.services import UserUsageService
        from quotakeeper.lib.exceptions import ApplicationError, after_exception_hook_handler, exception_to_http_response
        from quotakeeper.lib.usage_limits import UsageLimitService
        from quotakeeper.server import plugins

        settings = get_settings()
        self.app_slug = settings.app.slug
        app_config.debug = settings.app.DEBUG
        # openapi
        app_config.openapi_config = OpenAPIConfig(
            title=settings.app.NAME,
            version=current_version,
            components=[jwt_auth.openapi_components],
            security=[jwt_auth.security_requirement],
            use_handler_docstrings=True,
            render_plugins=[ScalarRenderPlugin(version="latest")],
        )
        # jwt auth (updates openapi config)
        app_config = jwt_auth.on_app_init(app_config)
        # security
        app_config.cors_config = config.cors
        # plugins
        app_config.plugins.extend(
            [
                plugins.structlog,
                plugins.granian,
                plugins.alchemy,
                plugins.problem_details,
            ],
        )

        # routes
        app_config.route_handlers.extend(
            [
                SystemController,
                UsageController,
                UsageAdminController,
                UsageResetController,
            ],
        )
        # signatures
        app_config.signature_namespace.update(
            {
                "Token": Token,
                "m": m,
                "UUID": UUID,
                "AsyncSession": AsyncSession,
                "OperatorClaims": OperatorClaims,
                "ManualResetService": ManualResetService,
                "ResetLogService": ResetLogService,
                "QuotaConfigService": QuotaConfigService,
                "UserUsageService": UserUsageService,
                "UsageLimitService": UsageLimitService,
            },
        )
        # exception handling
        app_config.exception_handlers = {
            ApplicationError: exception_to_http_response,
            RepositoryError: exception_to_http_response,
        }
        app_config.after_exception.append(after_exception_hook_handler)
        # dependencies
        dependencies = {"manual_reset_service": Provide(provide_manual_reset_service, sync_to_thread=False)}
        app_config.dependencies.update(dependencies)
        return app_config

