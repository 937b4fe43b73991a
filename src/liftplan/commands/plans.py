"""Plan management commands."""

import click

from ..db import PlanRepository, SnapshotRepository
from ..errors import LiftplanError
from ..services.snapshots import Snapshot
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    load_program,
)


@click.group()
@click.pass_context
def plans(ctx):
    """Manage stored plans.

    Commands for importing, listing, viewing, and deleting plans.
    """
    ensure_initialized(ctx)


@plans.command(name="import")
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
@async_command
async def import_plan(ctx, plan_file: str):
    """Import a plan from a JSON file and record its first snapshot."""
    try:
        program = load_program(plan_file)
    except LiftplanError as e:
        echo_error(str(e))
        ctx.exit(1)

    plan_id = await PlanRepository().create(program)
    await SnapshotRepository().add(plan_id, Snapshot.capture(program, "Imported"))

    echo_success(f"Imported '{program.name}' as plan {plan_id}")


@plans.command(name="list")
@async_command
async def list_plans():
    """List all stored plans."""
    all_plans = await PlanRepository().list_all()

    if not all_plans:
        echo_info("No plans found. Import one with 'liftplan plans import'")
        return

    snapshot_repo = SnapshotRepository()
    headers = ["ID", "Name", "Weeks", "Days", "Versions", "Created"]
    rows = []

    for plan in all_plans:
        created = plan.created_at.strftime("%Y-%m-%d") if plan.created_at else "N/A"
        rows.append([
            str(plan.id),
            plan.name[:30] + "..." if len(plan.name) > 30 else plan.name,
            str(plan.total_weeks),
            str(plan.days_per_week),
            str(await snapshot_repo.count(plan.id)),
            created,
        ])

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(all_plans)} plan(s)")


@plans.command()
@click.argument("plan_id", type=int)
@click.pass_context
@async_command
async def show(ctx, plan_id: int):
    """Show the structure of a plan."""
    plan = await PlanRepository().get(plan_id)
    if not plan:
        echo_error(f"Plan ID {plan_id} not found")
        ctx.exit(1)

    click.echo()
    click.echo("=" * 60)
    click.echo(f"Plan: {plan.name} (ID: {plan.id})")
    click.echo("=" * 60)
    click.echo()
    click.echo(plan.get_summary())
    total_sets = sum(group.count for *_, group in plan.iter_set_groups())
    click.echo(f"Total prescribed sets: {total_sets}")


@plans.command()
@click.argument("plan_id", type=int)
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, plan_id: int, force: bool):
    """Delete a plan and its history."""
    repo = PlanRepository()

    plan = await repo.get(plan_id)
    if not plan:
        echo_error(f"Plan ID {plan_id} not found")
        ctx.exit(1)

    if not force:
        click.echo(f"Plan: {plan.name}")
        if not click.confirm("Are you sure you want to delete this plan?"):
            echo_info("Cancelled")
            return

    await repo.delete(plan_id)
    echo_success(f"Plan {plan_id} deleted")
