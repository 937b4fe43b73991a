"""Initialize project command."""

import click

from ..config import Config
from ..db import get_db_path, init_db
from .base import async_command, echo_info, echo_success


@click.command()
@async_command
async def init():
    """Initialize the liftplan data directory and database.

    This creates the data directory and the SQLite database that keeps
    plans and their snapshot history.
    """
    data_dir = Config.from_env().data_dir
    echo_info(f"Initializing liftplan in {data_dir}")

    db_path = get_db_path(data_dir)
    await init_db(db_path)
    echo_success("Database initialized")

    click.echo()
    click.echo("liftplan is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Import a plan:")
    click.echo("     liftplan plans import plan.json")
    click.echo()
    click.echo("  2. Save edits and compare versions:")
    click.echo("     liftplan history save 1 plan.json -m \"Bumped squat volume\"")
    click.echo("     liftplan history compare 1 1 0")
