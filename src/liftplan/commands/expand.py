"""Expand a set group into concrete sets."""

import json

import click

from ..config import Config
from ..errors import LiftplanError
from ..models.plan import ExerciseSet, SetGroup
from ..services.expansion import expand, is_uniform, summarize_group
from ..utils.units import WeightUnit, select_display_value
from .base import echo_error, format_table, load_json


def _cell(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _set_row(exercise_set: ExerciseSet, unit: WeightUnit) -> list[str]:
    reps = _cell(exercise_set.reps)
    if exercise_set.reps_max is not None:
        reps += f"-{exercise_set.reps_max}"
    return [
        str(exercise_set.set_number),
        exercise_set.set_type.value,
        reps,
        _cell(select_display_value(exercise_set.weight, exercise_set.weight_lbs, unit)),
        _cell(exercise_set.intensity_percent),
        _cell(exercise_set.rpe),
        str(exercise_set.tempo) if exercise_set.tempo else "-",
        f"{exercise_set.rest_seconds}s",
    ]


@click.command("expand")
@click.argument("group_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--unit",
    type=click.Choice([u.value for u in WeightUnit]),
    default=None,
    help="Display unit for weights (default: LIFTPLAN_WEIGHT_UNIT)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the expanded group as JSON")
@click.pass_context
def expand_cmd(ctx, group_file: str, unit: str | None, as_json: bool):
    """Expand a set-group JSON file into its concrete sets.

    Examples:

        liftplan expand squat_group.json

        liftplan expand squat_group.json --unit lbs --json
    """
    display_unit = WeightUnit(unit) if unit else Config.from_env().weight_unit

    try:
        group = SetGroup.from_dict(load_json(group_file))
        sets = expand(group)
    except LiftplanError as e:
        reasons = getattr(e, "reasons", None) or [str(e)]
        for reason in reasons:
            echo_error(reason)
        ctx.exit(1)

    uniform = is_uniform(sets)

    if as_json:
        click.echo(json.dumps(
            {
                "id": group.id,
                "count": group.count,
                "uniform": uniform,
                "summary": summarize_group(group, display_unit),
                "sets": [s.to_dict() for s in sets],
            },
            indent=2,
        ))
        return

    headers = ["Set", "Type", "Reps", f"Weight ({display_unit.value})", "%1RM", "RPE", "Tempo", "Rest"]
    click.echo()
    click.echo(format_table(headers, [_set_row(s, display_unit) for s in sets]))
    click.echo()
    click.echo(f"Summary: {summarize_group(group, display_unit)}")
    click.echo(f"Uniform: {'yes' if uniform else 'no'}")
