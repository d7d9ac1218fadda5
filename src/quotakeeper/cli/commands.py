"""Job runtime entry points.

The external scheduler invokes these commands (UTC)::

    litestar quota reset daily      # 0 0 * * *
    litestar quota reset weekly     # 0 0 * * 1
    litestar quota reset monthly    # 0 0 1 * *
    litestar quota check-health     # 0 */6 * * *
"""

from __future__ import annotations

from typing import Any

import click

__all__ = ("quota_management_group",)


@click.group(name="quota", invoke_without_command=False, help="Run usage quota reset and health jobs.")
@click.pass_context
def quota_management_group(_: dict[str, Any]) -> None:
    """Manage usage quota resets."""


@quota_management_group.command(name="reset", help="Reset one usage period for every tracked account.")
@click.argument("reset_kind", type=click.Choice(["daily", "weekly", "monthly"]))
def reset_usage(reset_kind: str) -> None:
    """Run one scheduled reset."""
    import anyio
    from rich import get_console

    from quotakeeper.config.app import alchemy
    from quotakeeper.domain.resets.executor import UsageResetService

    console = get_console()

    async def _reset_usage(reset_kind: str) -> None:
        await _ensure_schema()
        async with alchemy.get_session() as db_session:
            outcome = await UsageResetService(db_session).run_reset(reset_kind)
        style = "green" if outcome.completed else "red"
        console.print(
            f"[{style}]{reset_kind} reset {outcome.status.value}[/]: "
            f"{outcome.users_reset} users in {len(outcome.batch_sizes)} batches",
        )
        if outcome.error:
            console.print(f"[red]{outcome.error}[/]")

    console.rule(f"Usage reset: {reset_kind}")
    anyio.run(_reset_usage, reset_kind)


@quota_management_group.command(name="check-health", help="Verify that daily resets are running.")
def check_health() -> None:
    """Run the reset health monitor once."""
    import anyio
    from rich import get_console

    from quotakeeper.config.app import alchemy
    from quotakeeper.domain.health.monitor import ResetHealthMonitor

    console = get_console()

    async def _check_health() -> None:
        await _ensure_schema()
        async with alchemy.get_session() as db_session:
            report = await ResetHealthMonitor(db_session).check_health()
        style = {"healthy": "green", "warning": "yellow"}.get(report.status.value, "red")
        console.print(f"[{style}]Reset system {report.status.value}[/]")
        console.print(f"Next daily reset:   {report.next_daily.isoformat()}")
        console.print(f"Next weekly reset:  {report.next_weekly.isoformat()}")
        console.print(f"Next monthly reset: {report.next_monthly.isoformat()}")

    anyio.run(_check_health)


async def _ensure_schema() -> None:
    from quotakeeper.config import get_settings
    from quotakeeper.config.app import alchemy
    from quotakeeper.db import create_all

    if get_settings().db.CREATE_ALL:
        await create_all(alchemy.get_engine())
