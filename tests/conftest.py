"""
Pytest configuration for DYMO printer tests.

Provides image fixtures and a fake command runner standing in for
lp, lpstat, PowerShell and the raw print helper.
"""

from unittest.mock import AsyncMock

import pytest
from PIL import Image

from dymoprinter.errors import CommandError


LPSTAT_DESCRIPTION = """\
printer {device_id} is idle.  enabled since Mon 19 Oct 2026 09:12:01
\tForm mounts:
\tAlerts: none
\tDescription: {description}
\tLocation: Office
"""


class FakeSystem:
    """Scripted answers for external commands, keyed by command name."""

    def __init__(self):
        self.printers = []  # (device_id, description or None)
        self.fail = set()   # device ids whose description lookup fails
        self.windows_output = ""
        self.calls = []

    async def run(self, command, args=(), input=None):
        self.calls.append((command, list(args), input))

        if command == "lpstat" and list(args) == ["-e"]:
            return "".join(f"{device_id}\n" for device_id, _ in self.printers)

        if command == "lpstat":
            device_id = args[-1]
            if device_id in self.fail:
                raise CommandError(["lpstat", *args], 1, "lpstat: Invalid destination name")
            description = dict(self.printers).get(device_id)
            return LPSTAT_DESCRIPTION.format(device_id=device_id, description=description or "")

        if command == "Powershell.exe":
            return self.windows_output

        return ""


@pytest.fixture
def fake_system():
    """Fake command runner with no printers installed."""
    return FakeSystem()


@pytest.fixture
def dymo_installed(fake_system):
    """Fake system with a DYMO LabelWriter next to another printer."""
    fake_system.printers = [
        ("HP_LaserJet", "HP LaserJet Pro"),
        ("DYMO_LabelWriter_450", "DYMO LabelWriter 450"),
    ]
    return fake_system


@pytest.fixture
def runner_mock():
    """AsyncMock command runner that always succeeds."""
    return AsyncMock(return_value="")


@pytest.fixture
def black_image():
    """8x8 all black image."""
    return Image.new("RGB", (8, 8), color=(0, 0, 0))


@pytest.fixture
def label_image():
    """Small landscape label: white with a black box in the top-left corner."""
    img = Image.new("RGB", (40, 16), color=(255, 255, 255))
    for y in range(4):
        for x in range(10):
            img.putpixel((x, y), (0, 0, 0))
    return img
