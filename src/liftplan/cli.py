"""CLI entry point for liftplan."""

import click

from . import __version__
from .commands import diff, expand_cmd, history, init, plans, sync
from .config import Config
from .logging import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="liftplan")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: LIFTPLAN_LOG_LEVEL or WARNING)",
)
def main(log_level: str | None):
    """liftplan: training-plan computation core.

    Expand set groups, keep weight and intensity in sync, and keep a
    versioned history of plans with readable diffs.

    Example usage:

        # Initialize the project
        liftplan init

        # Expand a set group
        liftplan expand squat_group.json

        # Import a plan and save an edited version
        liftplan plans import plan.json
        liftplan history save 1 plan_v2.json -m "More squat volume"

        # Compare versions
        liftplan history compare 1 1 0
    """
    try:
        config = Config.from_env()
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    setup_logging(config.log_format, (log_level or config.log_level).upper())


# Register commands
main.add_command(init)
main.add_command(expand_cmd)
main.add_command(sync)
main.add_command(diff)
main.add_command(plans)
main.add_command(history)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
