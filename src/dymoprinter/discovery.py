"""
Installed printer discovery.

Uses the CUPS command line tools on macOS and Linux, and PowerShell on
Windows.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional, Sequence

from .errors import UnsupportedPlatformError
from .system import Platform, run_command

Runner = Callable[..., Awaitable[str]]

WINDOWS_LIST_COMMAND = "Get-CimInstance Win32_Printer -Property DeviceID,Name"

_DESCRIPTION = re.compile(r"^description:", re.IGNORECASE)


@dataclass(frozen=True)
class DiscoveredPrinter:
    """An installed printer."""
    device_id: str
    name: str

    def __str__(self) -> str:
        return f"{self.name} [{self.device_id}]"


async def list_printers(platform: Platform, run: Runner = run_command) -> list[DiscoveredPrinter]:
    """
    List the printers installed on this system.

    Args:
        platform: Operating system to query
        run: Command runner (see system.run_command)

    Returns:
        Printers in system enumeration order, possibly empty

    Raises:
        UnsupportedPlatformError: On operating systems other than
            Windows, macOS and Linux
        CommandError: If the listing command fails
    """
    if platform is Platform.WINDOWS:
        return await list_printers_windows(run)
    if platform in (Platform.MACOS, Platform.LINUX):
        return await list_printers_cups(run)
    raise UnsupportedPlatformError(
        f"Cannot list printers, unsupported operating system: {platform.value}"
    )


async def list_printers_cups(run: Runner = run_command) -> list[DiscoveredPrinter]:
    """List CUPS destinations, named by their description where available."""
    stdout = await run("lpstat", ["-e"])
    device_ids = [line.strip() for line in stdout.splitlines() if line.strip()]

    # Descriptions are best effort: a failed lookup keeps the derived name
    results = await asyncio.gather(
        *(run("lpstat", ["-l", "-p", device_id]) for device_id in device_ids),
        return_exceptions=True,
    )

    printers = []
    for device_id, result in zip(device_ids, results):
        name = None
        if isinstance(result, str):
            name = parse_description(result)
        printers.append(DiscoveredPrinter(device_id, name or name_from_device_id(device_id)))
    return printers


async def list_printers_windows(run: Runner = run_command) -> list[DiscoveredPrinter]:
    """List printers through PowerShell's Win32_Printer class."""
    stdout = await run("Powershell.exe", ["-Command", WINDOWS_LIST_COMMAND])
    return parse_cim_printers(stdout)


def name_from_device_id(device_id: str) -> str:
    """CUPS queue names use underscores for spaces."""
    return re.sub(r"_+", " ", device_id).strip()


def parse_description(output: str) -> Optional[str]:
    """Get the first non-empty "Description:" value from lpstat -l -p output."""
    for line in output.splitlines():
        line = line.strip()
        if _DESCRIPTION.match(line):
            description = _DESCRIPTION.sub("", line).strip()
            if description:
                return description
    return None


def parse_cim_printers(output: str) -> list[DiscoveredPrinter]:
    """
    Parse "Get-CimInstance Win32_Printer" list output.

    Printers are blocks of "Label : value" lines separated by blank
    lines. Blocks without both DeviceID and Name are skipped.
    """
    printers = []
    for block in re.split(r"(?:\r?\n){2,}", output):
        fields = {}
        for line in block.splitlines():
            label, sep, value = line.partition(":")
            if sep:
                fields.setdefault(label.strip().lower(), value.strip())
        device_id = fields.get("deviceid")
        name = fields.get("name")
        if device_id and name:
            printers.append(DiscoveredPrinter(device_id, name))
    return printers


def find_printer(printers: Iterable[DiscoveredPrinter], match: str) -> Optional[DiscoveredPrinter]:
    """
    Pick the first printer whose name contains match (case-insensitive).

    Enumeration order decides between several matching printers.
    """
    needle = match.lower()
    for printer in printers:
        if printer.name and needle in printer.name.lower():
            return printer
    return None


def format_printers(printers: Sequence[DiscoveredPrinter]) -> list[str]:
    """Aligned "device_id  name" lines for display."""
    if not printers:
        return []
    width = max(len(p.device_id) for p in printers)
    return [f"{p.device_id:<{width}}  {p.name}" for p in printers]
