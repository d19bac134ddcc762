"""
DYMO LabelWriter 450 raster protocol.

The printer takes ESC command sequences to set up the label, followed by
raster lines: a SYN byte and the packed dots of one print head pass.

Reference: LabelWriter 450 Series Technical Reference Manual
"""

from dataclasses import dataclass
from typing import Sequence

from .errors import InvalidArgumentError, ProtocolError


ESC = 0x1B
SYN = 0x16  # Raster line marker

# Returns the printer to its power-up condition and clears all buffers
CMD_RESET = bytes([ESC, ord("*")])
# Feed to tear position, ends the job
CMD_FULL_FORM_FEED = bytes([ESC, ord("E")])
# Feed to print head, used between labels of the same job
CMD_SHORT_FORM_FEED = bytes([ESC, ord("G")])
# 300x300 dpi text quality mode
CMD_TEXT_SPEED_MODE = bytes([ESC, ord("h")])
# Strobe time at 100% of the standard duty cycle
CMD_DENSITY_NORMAL = bytes([ESC, ord("e")])
CMD_DOT_TAB = bytes([ESC, ord("B")])
CMD_BYTES_PER_LINE = bytes([ESC, ord("D")])
CMD_LABEL_LENGTH = bytes([ESC, ord("L")])

# A printer waiting for raster data needs more ESC bytes than a full
# raster line (84) before it parses commands again
SYNC_LENGTH = 313
CMD_SYNC = bytes([ESC]) * SYNC_LENGTH

MAX_BYTES_PER_LINE = 0xFF
MAX_LABEL_LENGTH = 0xFFFF


@dataclass(frozen=True)
class LabelGeometry:
    """Label size in dots, derived from a packed bitmap."""
    line_width_bits: int
    line_count: int

    @classmethod
    def from_bitmap(cls, rows: Sequence[bytes]) -> "LabelGeometry":
        return cls(len(rows[0]) * 8 if rows else 0, len(rows))

    @property
    def line_width_bytes(self) -> int:
        return (self.line_width_bits + 7) // 8


class LabelWriterCommand:
    """
    LabelWriter command builder.

    Collects command fragments and raster lines; get_commands() joins
    them in the order they were added.
    """

    def __init__(self):
        self._commands: list[bytes] = []

    def clear(self):
        """Clear all queued commands."""
        self._commands.clear()

    def get_commands(self) -> bytes:
        """Get all commands as a single byte string."""
        return b"".join(self._commands)

    def _add(self, data: bytes):
        self._commands.append(bytes(data))

    # ---- Setup Commands ----

    def sync(self):
        """Send enough ESC bytes to leave any pending raster line."""
        self._add(CMD_SYNC)

    def reset(self):
        """Reset the printer to its power-up state."""
        self._add(CMD_RESET)

    def dot_tab(self, dots_bytes: int = 0):
        """Shift the print start position right by n bytes (8 dots each)."""
        self._add(CMD_DOT_TAB + bytes([_check_byte(dots_bytes, "Dot tab")]))

    def bytes_per_line(self, count: int):
        """Set the number of bytes sent per raster line."""
        self._add(CMD_BYTES_PER_LINE + bytes([_check_byte(count, "Bytes per line")]))

    def label_length(self, lines: int):
        """Set the label length in lines (most significant byte first)."""
        if not 0 <= lines <= MAX_LABEL_LENGTH:
            raise ProtocolError(
                f"Label length {lines} does not fit the protocol (max {MAX_LABEL_LENGTH})"
            )
        self._add(CMD_LABEL_LENGTH + bytes([(lines >> 8) & 0xFF, lines & 0xFF]))

    def text_speed_mode(self):
        """Select 300x300 dpi text quality mode."""
        self._add(CMD_TEXT_SPEED_MODE)

    def density_normal(self):
        """Select normal print density."""
        self._add(CMD_DENSITY_NORMAL)

    def setup_label(self, geometry: LabelGeometry):
        """Convenience: full job header for the given label geometry."""
        self.sync()
        self.reset()
        self.dot_tab(0)
        self.bytes_per_line(geometry.line_width_bytes)
        self.label_length(geometry.line_count)
        self.text_speed_mode()
        self.density_normal()

    # ---- Print Commands ----

    def raster_line(self, row: bytes):
        """Print one line of dots."""
        self._add(bytes([SYN]) + bytes(row))

    def short_form_feed(self):
        """Advance to the next label without ejecting."""
        self._add(CMD_SHORT_FORM_FEED)

    def full_form_feed(self):
        """Advance the last label to the tear-off position."""
        self._add(CMD_FULL_FORM_FEED)


def _check_byte(value: int, name: str) -> int:
    if not 0 <= value <= MAX_BYTES_PER_LINE:
        raise ProtocolError(f"{name} value {value} does not fit in one byte")
    return value


def validate_bitmap(rows: Sequence[bytes], copies: int) -> LabelGeometry:
    """
    Check a packed bitmap and copy count before encoding.

    Returns:
        The label geometry of the bitmap

    Raises:
        InvalidArgumentError: Empty bitmap, uneven rows or copies < 1
        ProtocolError: Bitmap too wide or too long for the command fields
    """
    if not rows:
        raise InvalidArgumentError("Empty bitmap, cannot print")
    if isinstance(copies, bool) or not isinstance(copies, int) or copies <= 0:
        raise InvalidArgumentError(f"Copies must be a positive integer: {copies!r}")

    row_length = len(rows[0])
    if row_length == 0:
        raise InvalidArgumentError("Bitmap rows are empty, cannot print")
    for index, row in enumerate(rows):
        if len(row) != row_length:
            raise InvalidArgumentError(
                f"Bitmap row {index} is {len(row)} bytes, expected {row_length}"
            )

    geometry = LabelGeometry.from_bitmap(rows)
    if geometry.line_width_bytes > MAX_BYTES_PER_LINE:
        raise ProtocolError(
            f"Bitmap is {geometry.line_width_bytes} bytes wide, "
            f"the printer accepts at most {MAX_BYTES_PER_LINE} bytes per line"
        )
    if geometry.line_count > MAX_LABEL_LENGTH:
        raise ProtocolError(
            f"Bitmap has {geometry.line_count} lines, "
            f"the printer accepts at most {MAX_LABEL_LENGTH}"
        )
    return geometry


def encode_bitmap(rows: Sequence[bytes], copies: int = 1) -> bytes:
    """
    Encode a packed bitmap as a complete print job.

    Args:
        rows: Packed scanlines, top line first
        copies: Number of labels to print

    Returns:
        Printer command stream
    """
    geometry = validate_bitmap(rows, copies)

    cmd = LabelWriterCommand()
    cmd.setup_label(geometry)

    for copy in range(1, copies + 1):
        for row in rows:
            cmd.raster_line(row)
        if copy == copies:
            cmd.full_form_feed()
        else:
            cmd.short_form_feed()

    return cmd.get_commands()
