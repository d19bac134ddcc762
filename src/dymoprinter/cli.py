"""
Command-Line Interface for DYMO LabelWriter printers.

Usage:
    dymo-printer list               - List installed printers
    dymo-printer labels             - Show known label sizes
    dymo-printer print IMAGE        - Print an image
    dymo-printer text "Hello"       - Print text on a label

Without connection options the first installed DYMO printer is used.
"""

import asyncio
import sys

import click

from .config import Interface, PrinterConfig
from .discovery import format_printers
from .errors import ConfigurationError, PrinterError
from .image import FONT_SIZES
from .printer import DymoPrinter


@click.group()
@click.option("--debug/--no-debug", default=False, help="Enable debug output")
@click.option(
    "--interface",
    "-i",
    type=click.Choice([i.value for i in Interface], case_sensitive=False),
    help="How to reach the printer (default: discover)",
)
@click.option("--host", help="Network printer host (NETWORK, default localhost)")
@click.option("--port", type=click.IntRange(1, 65535), help="Network printer port (default 9100)")
@click.option("--device-id", help="Printer name for CUPS or WINDOWS")
@click.option("--device", help="Device file for DEVICE, e.g. /dev/usb/lp0")
@click.option("--match", help="Printer name to look for during discovery (default: dymo)")
@click.pass_context
def main(ctx, debug, interface, host, port, device_id, device, match):
    """DYMO LabelWriter CLI."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["config"] = {
        "interface": interface,
        "host": host,
        "port": port,
        "device_id": device_id,
        "device": device,
        "match": match,
    }


def make_printer(ctx) -> DymoPrinter:
    """Create a printer from the group options, exiting on bad configuration."""
    try:
        printer = DymoPrinter(PrinterConfig.from_dict(ctx.obj["config"]))
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)
    printer.set_debug(ctx.obj["debug"])
    return printer


def run_print(coro) -> None:
    """Run a print coroutine, reporting printer errors on stderr."""
    try:
        target = asyncio.run(coro)
    except PrinterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Print complete ({target})")


@main.command("list")
@click.pass_context
def list_printers(ctx):
    """List installed printers."""
    printer = make_printer(ctx)

    try:
        printers = asyncio.run(printer.list_printers())
    except PrinterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not printers:
        click.echo("No printers found.")
        return

    click.echo(f"Found {len(printers)} printer(s):\n")
    for line in format_printers(printers):
        click.echo(f"  {line}")


@main.command()
def labels():
    """Show known label sizes."""
    for name, (width, height) in DymoPrinter.LABELS.items():
        click.echo(f"  {name}: {width}x{height} px")


@main.command("print")
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.option("--copies", "-c", type=click.IntRange(min=1), default=1, help="Number of copies")
@click.option(
    "--no-rotate",
    is_flag=True,
    help="Image is already in print orientation (portrait)",
)
@click.pass_context
def print_image(ctx, image, copies, no_rotate):
    """Print an image file.

    The image should be landscape and sized to the label at 300 dpi
    (see 'labels').
    """
    printer = make_printer(ctx)
    click.echo(f"Printing {image}...")
    run_print(printer.print_image(image, copies=copies, rotate=not no_rotate))


@main.command()
@click.argument("text")
@click.option(
    "--label",
    "-l",
    type=click.Choice(list(DymoPrinter.LABELS)),
    default=DymoPrinter.DEFAULT_LABEL,
    show_default=True,
    help="Label size",
)
@click.option(
    "--font-size",
    "-s",
    type=click.Choice([str(size) for size in FONT_SIZES]),
    default=str(DymoPrinter.DEFAULT_FONT_SIZE),
    show_default=True,
    help="Font size in pixels",
)
@click.option(
    "--margin",
    type=click.IntRange(min=0),
    default=DymoPrinter.DEFAULT_MARGIN,
    show_default=True,
    help="Left and right margin in pixels",
)
@click.option("--copies", "-c", type=click.IntRange(min=1), default=1, help="Number of copies")
@click.option(
    "--save",
    type=click.Path(dir_okay=False, writable=True),
    help="Save the rendered label image instead of printing",
)
@click.pass_context
def text(ctx, text, label, font_size, margin, copies, save):
    """Print TEXT on a label.

    Use "\\n" in TEXT to start a new line.
    """
    printer = make_printer(ctx)
    text = text.replace("\\n", "\n")

    try:
        image = printer.render_text(text, label, int(font_size), margin)
    except PrinterError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if save:
        try:
            image.save(save)
        except (ValueError, OSError) as e:
            click.echo(f"Error: Cannot save {save}: {e}", err=True)
            sys.exit(1)
        click.echo(f"Saved label image to {save}")
        return

    click.echo(f"Printing '{label}' label...")
    run_print(printer.print_image(image, copies=copies))


if __name__ == "__main__":
    main()
