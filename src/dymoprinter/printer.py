"""
High-Level DYMO LabelWriter Interface.

Provides a simple API for printing labels: images are rotated to the
printer's orientation, converted to a packed bitmap, encoded as raster
commands and sent to the configured (or discovered) printer.
"""

from typing import Any, Mapping, Optional, Sequence, Union

from PIL import Image

from .config import PrinterConfig, PrinterTarget
from .connection import dispatch
from .discovery import DiscoveredPrinter, list_printers
from .errors import InvalidArgumentError
from .image import ImageSource, create_image_with_text, load_image, rotate_for_printing, to_bitmap
from .protocol import encode_bitmap
from .system import Platform, run_command


ConfigSource = Union[PrinterConfig, Mapping[str, Any], None]


class DymoPrinter:
    """
    High-level interface to a DYMO LabelWriter.

    Images are expected in landscape orientation, sized to the label at
    300 dpi (see LABELS).
    """

    # Label sizes in pixels at 300 dpi, landscape
    LABELS = {
        "89mm x 28mm": (964, 300),  # 99010 address labels
        "89mm x 36mm": (964, 390),  # 99012 large address labels
        "54mm x 25mm": (584, 270),  # 11352 return address labels
    }
    DEFAULT_LABEL = "89mm x 36mm"

    DEFAULT_FONT_SIZE = 64
    DEFAULT_MARGIN = 50

    def __init__(self, config: ConfigSource = None, platform: Optional[Platform] = None):
        """
        Initialize printer interface.

        Args:
            config: PrinterConfig, a mapping such as {"interface": "NETWORK",
                "host": "10.0.0.5"}, or None to discover the printer
            platform: Operating system (detected when omitted)

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if isinstance(config, PrinterConfig):
            self.config = config
        else:
            self.config = PrinterConfig.from_dict(config)
        # Fail now rather than at the first print
        self.config.target()

        self.platform = platform or Platform.detect()
        self._run = run_command
        self._debug = False

    def set_debug(self, enabled: bool):
        """Enable/disable debug output."""
        self._debug = enabled

    def _log(self, message: str):
        """Print debug message if enabled."""
        if self._debug:
            print(f"[DYMO] {message}")

    async def list_printers(self) -> list[DiscoveredPrinter]:
        """
        List all installed printers.

        Raises:
            UnsupportedPlatformError: On unsupported operating systems
        """
        return await list_printers(self.platform, self._run)

    def build_job(self, image: ImageSource, copies: int = 1, rotate: bool = True) -> bytes:
        """
        Build the printer command stream for an image.

        Args:
            image: Image source (path, bytes, or PIL Image)
            copies: Number of labels
            rotate: Rotate the landscape image to print orientation

        Returns:
            Command bytes, identical for identical input
        """
        _check_copies(copies)

        img = load_image(image)
        self._log(f"Image size: {img.width}x{img.height} pixels")
        if rotate:
            img = rotate_for_printing(img)

        rows = to_bitmap(img)
        self._log(f"Bitmap: {len(rows)} lines of {len(rows[0]) if rows else 0} bytes")

        return encode_bitmap(rows, copies)

    async def print_image(
        self,
        image: ImageSource,
        copies: int = 1,
        rotate: bool = True,
    ) -> PrinterTarget:
        """
        Print an image.

        Args:
            image: Image source (path, bytes, or PIL Image), landscape
                and sized to the label
            copies: Number of labels to print
            rotate: Rotate the image to print orientation (disable for
                images that are already portrait)

        Returns:
            The target the job was sent to

        Raises:
            InvalidArgumentError: If copies < 1 or the image is invalid
            NoPrinterFoundError: If no printer is configured or found
            TransportError: If the job could not be delivered
        """
        job_data = self.build_job(image, copies, rotate)
        self._log(f"Print job size: {len(job_data)} bytes")
        return await self._send(job_data)

    async def print_bitmap(self, rows: Sequence[bytes], copies: int = 1) -> PrinterTarget:
        """Print a packed bitmap (portrait, one bytes object per line)."""
        job_data = encode_bitmap(rows, copies)
        return await self._send(job_data)

    async def print_text(
        self,
        text: str,
        label: str = DEFAULT_LABEL,
        font_size: int = DEFAULT_FONT_SIZE,
        margin: int = DEFAULT_MARGIN,
        copies: int = 1,
    ) -> PrinterTarget:
        """Render text on a label and print it."""
        return await self.print_image(self.render_text(text, label, font_size, margin), copies)

    def render_text(
        self,
        text: str,
        label: str = DEFAULT_LABEL,
        font_size: int = DEFAULT_FONT_SIZE,
        margin: int = DEFAULT_MARGIN,
    ) -> Image.Image:
        """Render text on an image the size of the given label."""
        try:
            width, height = self.LABELS[label]
        except KeyError:
            raise InvalidArgumentError(
                f"Unknown label '{label}', valid labels are: {', '.join(self.LABELS)}"
            ) from None
        return create_image_with_text(width, height, margin, font_size, text)

    async def _send(self, job_data: bytes) -> PrinterTarget:
        target = await dispatch(job_data, self.config, self.platform, self._run, self._log)
        self._log("Print job sent successfully")
        return target


def _check_copies(copies: int):
    if isinstance(copies, bool) or not isinstance(copies, int) or copies <= 0:
        raise InvalidArgumentError(f"Copies must be a positive integer: {copies!r}")


async def quick_print(
    image: ImageSource,
    copies: int = 1,
    config: ConfigSource = None,
) -> PrinterTarget:
    """
    Convenience function to quickly print an image.

    Args:
        image: Image source (path, bytes, or PIL Image)
        copies: Number of labels
        config: Printer configuration, None to discover the printer

    Returns:
        The target the job was sent to
    """
    printer = DymoPrinter(config)
    return await printer.print_image(image, copies)
