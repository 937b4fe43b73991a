"""Weight / intensity synchronization command."""

import json

import click

from ..config import Config
from ..services.sync import (
    ActiveField,
    WeightFields,
    is_linked,
    synchronize,
)
from ..utils.units import WeightUnit, kg_to_lbs, select_display_value, to_canonical
from .base import echo_error, echo_warning


@click.command("sync")
@click.option("--weight", "-w", type=float, help="Edited weight")
@click.option("--intensity", "-i", type=float, help="Edited intensity (% of max)")
@click.option("--max", "reference_max", type=float, help="Reference maximum (e.g. 1RM)")
@click.option(
    "--unit",
    type=click.Choice([u.value for u in WeightUnit]),
    default=None,
    help="Unit of --weight and --max (default: LIFTPLAN_WEIGHT_UNIT)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def sync(ctx, weight: float | None, intensity: float | None, reference_max: float | None, unit: str | None, as_json: bool):
    """Recompute intensity from weight, or weight from intensity.

    Exactly one of --weight or --intensity is the edited value.

    Examples:

        liftplan sync --weight 70 --max 100

        liftplan sync --intensity 80 --max 225 --unit lbs
    """
    if (weight is None) == (intensity is None):
        echo_error("Pass exactly one of --weight or --intensity")
        ctx.exit(1)

    input_unit = WeightUnit(unit) if unit else Config.from_env().weight_unit
    weight_kg = to_canonical(weight, input_unit)
    max_kg = to_canonical(reference_max, input_unit)

    if not is_linked(max_kg):
        echo_warning("No reference maximum; weight and intensity are independent")

    active = ActiveField.WEIGHT if weight is not None else ActiveField.INTENSITY
    fields = WeightFields(
        weight=weight_kg,
        weight_lbs=kg_to_lbs(weight_kg),
        intensity_percent=intensity,
    )
    result = synchronize(fields, active, max_kg)

    if as_json:
        click.echo(json.dumps(
            {
                "active_field": active.value,
                "reference_max": max_kg,
                "weight": result.weight,
                "weight_lbs": result.weight_lbs,
                "intensity_percent": result.intensity_percent,
            },
            indent=2,
        ))
        return

    shown = select_display_value(result.weight, result.weight_lbs, input_unit)
    click.echo(f"Weight:    {'-' if shown is None else f'{shown:g}'} {input_unit.value}")
    if result.intensity_percent is None:
        click.echo("Intensity: -")
    else:
        click.echo(f"Intensity: {result.intensity_percent:g}%")
