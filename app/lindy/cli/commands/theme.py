"""Theme commands.

Show and change the console color mode and accent color. Changes are
saved immediately and take effect on the next run.
"""

from enum import Enum
from typing import Annotated

import typer
from rich.table import Table

from lindy.core.theme import ACCENT_PALETTES, Accent, ThemeMode, ThemeSettings
from lindy.utils.formatting import console, print_error, print_success

app = typer.Typer(
    help="Show or change console colors.",
    no_args_is_help=True,
)


class ModeChoice(str, Enum):
    """Mode argument values."""

    LIGHT = "light"
    DARK = "dark"
    TOGGLE = "toggle"


@app.command()
def show() -> None:
    """Show the current mode and accent color."""
    settings = ThemeSettings()
    console.print(f"Mode:   [accent]{settings.mode.value}[/]")
    console.print(f"Accent: [{settings.palette.main}]{settings.accent.value}[/]")

    table = Table(title="Accents", header_style="bold_header", border_style="border")
    table.add_column("Name")
    table.add_column("Main")
    table.add_column("Light")
    table.add_column("Dark")
    for accent, palette in ACCENT_PALETTES.items():
        marker = " *" if accent == settings.accent else ""
        table.add_row(
            f"{accent.value}{marker}",
            f"[{palette.main}]■[/] {palette.main}",
            f"[{palette.light}]■[/] {palette.light}",
            f"[{palette.dark}]■[/] {palette.dark}",
        )
    console.print(table)


@app.command()
def mode(
    choice: Annotated[
        ModeChoice,
        typer.Argument(help="light, dark or toggle.", case_sensitive=False),
    ] = ModeChoice.TOGGLE,
) -> None:
    """Set or toggle the color mode."""
    settings = ThemeSettings()
    if choice == ModeChoice.TOGGLE:
        new_mode = settings.toggle_mode()
    else:
        new_mode = ThemeMode(choice.value)
        settings.set_mode(new_mode)
    print_success(f"Mode set to {new_mode.value}.")


@app.command()
def accent(
    name: Annotated[
        str,
        typer.Argument(help="Accent name, or 'next' to cycle."),
    ] = "next",
) -> None:
    """Set the accent color, or cycle to the next one."""
    settings = ThemeSettings()
    if name == "next":
        chosen = settings.cycle_accent()
    else:
        try:
            chosen = Accent(name)
        except ValueError:
            valid = ", ".join(a.value for a in Accent)
            print_error(f"Unknown accent '{name}'. Choose one of: {valid}, next.")
            raise typer.Exit(code=1) from None
        settings.set_accent(chosen)
    print_success(f"Accent set to {chosen.value}.")
