import click

from mealkit.infrastructure.cli.menu_commands import menu_list
from mealkit.infrastructure.cli.order_commands import order_place
from mealkit.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """MealKit meal ordering demo"""


# Register subcommands
cli.add_command(menu_list)
cli.add_command(order_place)


def main() -> None:
    configure_logging()
    cli()
