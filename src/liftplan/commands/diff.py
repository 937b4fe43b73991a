"""Semantic diff between two plan files."""

import json

import click

from ..errors import LiftplanError
from ..services.diff import ChangeRecord, diff_programs, format_change
from .base import echo_error, echo_info, load_json


def echo_changes(changes: list[ChangeRecord], as_json: bool = False) -> None:
    """Print change records as text lines or JSON."""
    if as_json:
        click.echo(json.dumps([c.to_dict() for c in changes], indent=2))
        return

    if not changes:
        echo_info("No changes")
        return

    colors = {"added": "green", "removed": "red", "modified": "yellow"}
    for change in changes:
        click.echo(click.style(format_change(change), fg=colors[change.action.value]))
    click.echo()
    click.echo(f"Total: {len(changes)} change(s)")


@click.command("diff")
@click.argument("old_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("new_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print change records as JSON")
@click.pass_context
def diff(ctx, old_file: str, new_file: str, as_json: bool):
    """Show what changed between two plan JSON files.

    Example:

        liftplan diff plan_v1.json plan_v2.json
    """
    try:
        older = load_json(old_file)
        newer = load_json(new_file)
    except LiftplanError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_changes(diff_programs(older, newer), as_json)
