"""Shared CLI utilities."""

import asyncio
import json
from functools import wraps
from pathlib import Path

import click

from ..db import get_db_path
from ..errors import MalformedPlanError
from ..models.plan import Program


def async_command(f):
    """Decorator to run async Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    db_path = get_db_path()
    if not db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Project not initialized. Run 'liftplan init' first."
        )
        ctx.exit(1)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message, err=True)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def load_json(path: str | Path) -> dict:
    """Read a JSON object from a file."""
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise MalformedPlanError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedPlanError(f"{path} must contain a JSON object")
    return data


def load_program(path: str | Path) -> Program:
    """Read and validate a plan from a JSON file."""
    return Program.from_dict(load_json(path))


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Render rows as left-aligned columns under a dashed header."""
    if not rows:
        return ""

    widths = [
        max(len(str(cell)) for cell in column)
        for column in zip(headers, *rows)
    ]
    gap = " " * padding

    def render(cells) -> str:
        return gap.join(str(cell).ljust(width) for cell, width in zip(cells, widths)).rstrip()

    lines = [render(headers), gap.join("-" * width for width in widths)]
    lines.extend(render(row) for row in rows)
    return "\n".join(lines)
