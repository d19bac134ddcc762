"""Tests for the LabelWriter raster protocol."""

import pytest

from dymoprinter.errors import InvalidArgumentError, ProtocolError
from dymoprinter.protocol import (
    CMD_FULL_FORM_FEED,
    CMD_SHORT_FORM_FEED,
    SYNC_LENGTH,
    LabelGeometry,
    LabelWriterCommand,
    encode_bitmap,
)

ESC = b"\x1b"

HEADER_LENGTH = SYNC_LENGTH + 2 + 3 + 3 + 4 + 2 + 2


def header(bytes_per_line: int, lines: int) -> bytes:
    return (
        ESC * 313
        + b"\x1b*"
        + b"\x1bB\x00"
        + b"\x1bD" + bytes([bytes_per_line])
        + b"\x1bL" + bytes([lines >> 8, lines & 0xFF])
        + b"\x1bh"
        + b"\x1be"
    )


class TestLabelWriterCommand:
    """Test the command builder."""

    def test_empty(self):
        assert LabelWriterCommand().get_commands() == b""

    def test_commands_in_order(self):
        cmd = LabelWriterCommand()
        cmd.reset()
        cmd.dot_tab(0)
        cmd.short_form_feed()
        cmd.full_form_feed()

        assert cmd.get_commands() == b"\x1b*\x1bB\x00\x1bG\x1bE"

    def test_sync_is_313_escapes(self):
        cmd = LabelWriterCommand()
        cmd.sync()

        assert cmd.get_commands() == ESC * 313

    def test_bytes_per_line(self):
        cmd = LabelWriterCommand()
        cmd.bytes_per_line(42)

        assert cmd.get_commands() == b"\x1bD\x2a"

    def test_bytes_per_line_too_large(self):
        with pytest.raises(ProtocolError, match="one byte"):
            LabelWriterCommand().bytes_per_line(256)

    def test_label_length_big_endian(self):
        cmd = LabelWriterCommand()
        cmd.label_length(1052)

        assert cmd.get_commands() == b"\x1bL\x04\x1c"

    def test_label_length_too_large(self):
        with pytest.raises(ProtocolError):
            LabelWriterCommand().label_length(0x10000)

    def test_raster_line(self):
        cmd = LabelWriterCommand()
        cmd.raster_line(b"\x0f\xf0")

        assert cmd.get_commands() == b"\x16\x0f\xf0"

    def test_clear(self):
        cmd = LabelWriterCommand()
        cmd.reset()
        cmd.clear()

        assert cmd.get_commands() == b""


class TestLabelGeometry:
    """Test geometry derived from a bitmap."""

    def test_from_bitmap(self):
        geometry = LabelGeometry.from_bitmap([bytes(42)] * 964)

        assert geometry == LabelGeometry(336, 964)
        assert geometry.line_width_bytes == 42

    def test_line_width_bytes_rounds_up(self):
        assert LabelGeometry(332, 1).line_width_bytes == 42


class TestEncodeBitmap:
    """Test encoding of complete print jobs."""

    def test_8x8_black_label(self):
        """1 byte per line, 8 lines: D field 0x01, L field 0x00 0x08."""
        rows = [b"\xff"] * 8

        data = encode_bitmap(rows, 1)

        assert data == header(1, 8) + b"\x16\xff" * 8 + b"\x1bE"
        assert data[SYNC_LENGTH + 5:SYNC_LENGTH + 8] == b"\x1bD\x01"
        assert data[SYNC_LENGTH + 8:SYNC_LENGTH + 12] == b"\x1bL\x00\x08"

    def test_header_is_sent_once(self):
        rows = [b"\x00\x00"] * 3

        data = encode_bitmap(rows, 3)

        assert data.startswith(header(2, 3))
        assert data.count(b"\x1b*") == 1

    @pytest.mark.parametrize("copies", [1, 2, 3, 10])
    def test_form_feeds(self, copies):
        """One full form feed at the end, short form feeds between copies."""
        rows = [b"\xaa", b"\x55"]

        data = encode_bitmap(rows, copies)
        body = data[HEADER_LENGTH:]

        assert body.count(CMD_FULL_FORM_FEED) == 1
        assert body.count(CMD_SHORT_FORM_FEED) == copies - 1
        assert body.endswith(CMD_FULL_FORM_FEED)

    def test_copies_layout(self):
        rows = [b"\x01", b"\x02"]

        data = encode_bitmap(rows, 2)

        copy = b"\x16\x01\x16\x02"
        assert data[HEADER_LENGTH:] == copy + b"\x1bG" + copy + b"\x1bE"

    def test_lines_top_to_bottom(self):
        rows = [bytes([n]) for n in range(10)]

        data = encode_bitmap(rows)

        body = data[HEADER_LENGTH:-2]
        assert body == b"".join(b"\x16" + row for row in rows)

    def test_label_length_field(self):
        rows = [b"\x00"] * 300

        data = encode_bitmap(rows)

        assert data[SYNC_LENGTH + 8:SYNC_LENGTH + 12] == b"\x1bL\x01\x2c"

    def test_identical_input_identical_output(self):
        rows = [b"\x12\x34", b"\x56\x78"]

        assert encode_bitmap(rows, 2) == encode_bitmap(rows, 2)

    @pytest.mark.parametrize("copies", [0, -1])
    def test_non_positive_copies(self, copies):
        with pytest.raises(InvalidArgumentError, match="Copies"):
            encode_bitmap([b"\xff"], copies)

    def test_empty_bitmap(self):
        with pytest.raises(InvalidArgumentError, match="Empty bitmap"):
            encode_bitmap([], 1)

    def test_empty_rows(self):
        with pytest.raises(InvalidArgumentError):
            encode_bitmap([b"", b""], 1)

    def test_uneven_rows(self):
        with pytest.raises(InvalidArgumentError, match="row 1"):
            encode_bitmap([b"\x00\x00", b"\x00"], 1)

    def test_widest_line(self):
        data = encode_bitmap([bytes(255)], 1)

        assert data[SYNC_LENGTH + 5:SYNC_LENGTH + 8] == b"\x1bD\xff"

    def test_too_wide_for_protocol(self):
        with pytest.raises(ProtocolError, match="bytes per line"):
            encode_bitmap([bytes(256)], 1)

    def test_too_long_for_protocol(self):
        with pytest.raises(ProtocolError):
            encode_bitmap([b"\x00"] * 0x10000, 1)
