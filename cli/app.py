"""
midimsg - Inspect MIDI byte streams, Standard MIDI Files and SysEx dumps.

A CLI front end to the midimsg codec.
"""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from cli.commands.decode import decode
from cli.commands.dump import dump
from cli.commands.smf import smf
from cli.commands.sysex import sysex
from midimsg import __version__

console = Console()

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]

# Main app
app = typer.Typer(
    name="midimsg",
    help="Decode and inspect MIDI 1.0 messages, Standard MIDI Files and SysEx dumps.",
    add_completion=False,
    rich_markup_mode="rich",
)

# Add commands directly
app.command(name="decode")(decode)
app.command(name="smf")(smf)
app.command(name="sysex")(sysex)
app.command(name="dump")(dump)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]midimsg[/bold] version {__version__}")
    console.print("[dim]MIDI 1.0 message codec with SysEx and Standard MIDI File support[/dim]")


def setup_logging(verbose: int) -> None:
    level = LOG_LEVELS[min(verbose, len(LOG_LEVELS) - 1)]
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    logging.getLogger("midimsg").setLevel(level)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More output (-v info, -vv debug)"),
    version_flag: bool = typer.Option(False, "--version", "-V", help="Show version"),
) -> None:
    """
    midimsg - Decode and inspect MIDI data.

    [bold]Quick Start:[/bold]

        midimsg decode 90 3C 64          # Decode raw bytes
        midimsg smf song.mid             # Header and track events
        midimsg sysex dump.syx           # System Exclusive messages
        midimsg dump song.mid            # Annotated hex dump

    Use -v or -vv before the command for warnings and debug output, and
    --help with any command for more details.
    """
    setup_logging(verbose)

    if version_flag:
        version()
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
