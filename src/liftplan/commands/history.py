"""Version history commands."""

import click
import questionary

from ..config import Config
from ..db import PlanRepository, SnapshotRepository
from ..errors import LiftplanError
from ..models.plan import Program
from ..services.snapshots import Snapshot, SnapshotStore
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    load_program,
)
from .diff import echo_changes


def _snapshot_label(index: int, snapshot: Snapshot) -> str:
    when = snapshot.timestamp.strftime("%Y-%m-%d %H:%M")
    current = " (current)" if index == 0 else ""
    return f"[{index}] {when} {snapshot.description or 'Untitled'}{current}"


async def _load_plan_and_store(ctx: click.Context, plan_id: int) -> tuple[Program, SnapshotStore]:
    plan = await PlanRepository().get(plan_id)
    if not plan:
        echo_error(f"Plan ID {plan_id} not found")
        ctx.exit(1)

    limit = Config.from_env().history_limit
    store = await SnapshotRepository().load_store(plan_id, limit=limit)
    return plan, store


@click.group()
@click.pass_context
def history(ctx):
    """Save, browse, compare, and restore plan versions."""
    ensure_initialized(ctx)


@history.command()
@click.argument("plan_id", type=int)
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-m", "--message", default=None, help="Describe what changed")
@click.option("--force", is_flag=True, help="Record a checkpoint even if nothing changed")
@click.pass_context
@async_command
async def save(ctx, plan_id: int, plan_file: str, message: str | None, force: bool):
    """Save an edited plan file as the newest version of a plan."""
    plan, store = await _load_plan_and_store(ctx, plan_id)

    try:
        edited = load_program(plan_file)
    except LiftplanError as e:
        echo_error(str(e))
        ctx.exit(1)

    snapshot = store.push(edited, message, force=force)
    if snapshot is None:
        echo_info("No changes since the current version; nothing saved")
        return

    edited.id = plan.id
    await PlanRepository().update(edited)
    await SnapshotRepository().add(plan_id, snapshot)

    echo_success(f"Saved version of plan {plan_id}")
    if len(store) > 1:
        echo_changes(store.compare(1, 0))


@history.command(name="list")
@click.argument("plan_id", type=int)
@click.pass_context
@async_command
async def list_versions(ctx, plan_id: int):
    """List saved versions, most recent first."""
    plan, store = await _load_plan_and_store(ctx, plan_id)

    if not len(store):
        echo_info(f"Plan {plan_id} has no saved versions")
        return

    headers = ["Index", "Saved", "Description"]
    rows = [
        [
            str(i),
            s.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            (s.description or "") + (" (current)" if i == 0 else ""),
        ]
        for i, s in enumerate(store)
    ]

    click.echo()
    click.echo(f"History of '{plan.name}':")
    click.echo(format_table(headers, rows))


@history.command()
@click.argument("plan_id", type=int)
@click.argument("older", type=int)
@click.argument("newer", type=int, default=0)
@click.option("--json", "as_json", is_flag=True, help="Print change records as JSON")
@click.pass_context
@async_command
async def compare(ctx, plan_id: int, older: int, newer: int, as_json: bool):
    """Compare two versions by index (0 is the current version)."""
    _, store = await _load_plan_and_store(ctx, plan_id)

    try:
        changes = store.compare(older, newer)
    except LiftplanError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_changes(changes, as_json)


@history.command()
@click.argument("plan_id", type=int)
@click.argument("index", type=int, required=False)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def restore(ctx, plan_id: int, index: int | None, yes: bool):
    """Restore a saved version as the current plan.

    The restored state is saved as a new version on top of the history,
    so nothing is lost. Without INDEX, choose a version interactively.
    """
    plan, store = await _load_plan_and_store(ctx, plan_id)

    if len(store) < 2:
        echo_info("Nothing to restore: only the current version exists")
        return

    if index is None:
        index = await questionary.select(
            "Restore which version?",
            choices=[
                questionary.Choice(_snapshot_label(i, s), i)
                for i, s in enumerate(store)
                if i > 0
            ],
        ).ask_async()
        if index is None:
            echo_info("Cancelled")
            return

    try:
        changes = store.compare(0, index)
    except LiftplanError as e:
        echo_error(str(e))
        ctx.exit(1)

    if not changes:
        echo_info(f"Version {index} matches the current plan; nothing to restore")
        return

    echo_changes(changes)
    if not yes and not click.confirm(f"\nRestore version {index}?"):
        echo_info("Cancelled")
        return

    restored = Program.from_dict(store.restore(index), id=plan.id)
    snapshot = store.push(restored, f"Restored version {index}")
    await PlanRepository().update(restored)
    await SnapshotRepository().add(plan_id, snapshot)

    echo_success(f"Plan {plan_id} restored to version {index}")
