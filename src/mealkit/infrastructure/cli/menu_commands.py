"""CLI commands for browsing the menu."""

from __future__ import annotations

import click

from mealkit.infrastructure.bootstrap import meal_catalog
from mealkit.infrastructure.catalog.sample_catalog import HIGH_PROTEIN, KETO


@click.command("menu")
@click.option(
    "--diet",
    type=click.Choice([KETO, HIGH_PROTEIN], case_sensitive=False),
    default=None,
    help="Only show meals for this diet.",
)
def menu_list(diet: str | None) -> None:
    """List the meals on the menu."""
    catalog = meal_catalog()
    meals = catalog.list_by_tag(diet) if diet else catalog.list_all()

    if not meals:
        click.echo("No meals found.")
        return

    click.echo(f"{'Meal':<30} {'kcal':>5} {'P':>4} {'C':>4} {'F':>4} {'Price':>8}")
    click.echo("-" * 60)
    for meal in meals:
        click.echo(
            f"{meal.name:<30} {meal.calories:>5} {meal.protein:>4} "
            f"{meal.carbs:>4} {meal.fat:>4} {str(meal.price):>8}"
        )
