"""Tests for CLI functionality."""

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner
from PIL import Image

from dymoprinter.cli import main
from dymoprinter.config import SpoolerTarget
from dymoprinter.discovery import DiscoveredPrinter
from dymoprinter.errors import NoPrinterFoundError, UnsupportedPlatformError
from dymoprinter.printer import DymoPrinter


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "label.png"
    Image.new("RGB", (40, 16), color=(255, 255, 255)).save(path)
    return path


class TestLabels:
    def test_lists_presets(self, runner):
        result = runner.invoke(main, ["labels"])

        assert result.exit_code == 0
        assert "89mm x 36mm: 964x390 px" in result.output


class TestList:
    """Test the list command."""

    def test_lists_printers(self, runner):
        printers = [DiscoveredPrinter("DYMO_LabelWriter_450", "DYMO LabelWriter 450")]
        with patch.object(DymoPrinter, "list_printers", AsyncMock(return_value=printers)):
            result = runner.invoke(main, ["list"])

        assert result.exit_code == 0
        assert "Found 1 printer(s)" in result.output
        assert "DYMO_LabelWriter_450  DYMO LabelWriter 450" in result.output

    def test_no_printers(self, runner):
        with patch.object(DymoPrinter, "list_printers", AsyncMock(return_value=[])):
            result = runner.invoke(main, ["list"])

        assert result.exit_code == 0
        assert "No printers found." in result.output

    def test_unsupported_platform(self, runner):
        error = UnsupportedPlatformError("Cannot list printers, unsupported operating system: other")
        with patch.object(DymoPrinter, "list_printers", AsyncMock(side_effect=error)):
            result = runner.invoke(main, ["list"])

        assert result.exit_code == 1
        assert "unsupported operating system" in result.output


class TestPrint:
    """Test the print command."""

    def test_print_image(self, runner, image_file):
        mock = AsyncMock(return_value=SpoolerTarget("DYMO_LabelWriter_450"))
        with patch.object(DymoPrinter, "print_image", mock):
            result = runner.invoke(main, ["print", str(image_file), "--copies", "2"])

        assert result.exit_code == 0, result.output
        assert "Print complete" in result.output
        mock.assert_awaited_once_with(str(image_file), copies=2, rotate=True)

    def test_no_rotate(self, runner, image_file):
        mock = AsyncMock(return_value=SpoolerTarget("q"))
        with patch.object(DymoPrinter, "print_image", mock):
            runner.invoke(main, ["print", str(image_file), "--no-rotate"])

        assert mock.await_args.kwargs["rotate"] is False

    def test_printer_error(self, runner, image_file):
        error = NoPrinterFoundError("Cannot find a printer matching 'dymo'. Try to configure manually.")
        with patch.object(DymoPrinter, "print_image", AsyncMock(side_effect=error)):
            result = runner.invoke(main, ["print", str(image_file)])

        assert result.exit_code == 1
        assert "Error: Cannot find a printer" in result.output

    def test_zero_copies_rejected(self, runner, image_file):
        result = runner.invoke(main, ["print", str(image_file), "--copies", "0"])

        assert result.exit_code != 0

    def test_missing_file(self, runner):
        result = runner.invoke(main, ["print", "/nonexistent/label.png"])

        assert result.exit_code != 0

    def test_to_device(self, runner, image_file, tmp_path):
        device = tmp_path / "lp0"

        result = runner.invoke(
            main, ["--interface", "device", "--device", str(device), "print", str(image_file)]
        )

        assert result.exit_code == 0, result.output
        assert device.read_bytes().endswith(b"\x1bE")


class TestConnectionOptions:
    """Test group options building the printer configuration."""

    def test_invalid_interface(self, runner, image_file):
        result = runner.invoke(main, ["--interface", "USB", "print", str(image_file)])

        assert result.exit_code != 0
        assert "USB" in result.output

    def test_cups_without_device_id(self, runner, image_file):
        result = runner.invoke(main, ["--interface", "CUPS", "print", str(image_file)])

        assert result.exit_code == 2
        assert "deviceId is not configured" in result.output

    def test_network_options(self, runner, image_file):
        captured = {}

        async def fake_print(self, image, copies=1, rotate=True):
            captured["target"] = self.config.target()
            return captured["target"]

        with patch.object(DymoPrinter, "print_image", fake_print):
            result = runner.invoke(
                main,
                ["-i", "NETWORK", "--host", "10.0.0.5", "--port", "9101", "print", str(image_file)],
            )

        assert result.exit_code == 0, result.output
        assert captured["target"].host == "10.0.0.5"
        assert captured["target"].port == 9101


class TestText:
    """Test the text command."""

    def test_save(self, runner, tmp_path):
        path = tmp_path / "out.png"

        result = runner.invoke(main, ["text", "Hello World!", "--label", "54mm x 25mm", "--save", str(path)])

        assert result.exit_code == 0, result.output
        assert Image.open(path).size == (584, 270)

    def test_save_unknown_format(self, runner, tmp_path):
        path = tmp_path / "out.nosuchformat"

        result = runner.invoke(main, ["text", "Hello", "--save", str(path)])

        assert result.exit_code == 1
        assert "Error: Cannot save" in result.output

    def test_print(self, runner):
        mock = AsyncMock(return_value=SpoolerTarget("q"))
        with patch.object(DymoPrinter, "print_image", mock):
            result = runner.invoke(main, ["text", "Hello", "--copies", "3"])

        assert result.exit_code == 0, result.output
        image = mock.await_args.args[0]
        assert image.size == (964, 390)
        assert mock.await_args.kwargs["copies"] == 3

    def test_invalid_font_size(self, runner):
        result = runner.invoke(main, ["text", "Hello", "--font-size", "20"])

        assert result.exit_code != 0

    def test_empty_text(self, runner):
        result = runner.invoke(main, ["text", ""])

        assert result.exit_code == 1
        assert "Empty text" in result.output
