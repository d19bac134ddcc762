"""
Operating system helpers: platform detection and external commands.
"""

import asyncio
import platform
from enum import Enum
from typing import Optional, Sequence

from .errors import CommandError


class Platform(Enum):
    """Operating system family, resolved once and passed around."""
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    OTHER = "other"

    @classmethod
    def detect(cls) -> "Platform":
        """Map platform.system() to a Platform value."""
        system = platform.system()
        if system == "Windows":
            return cls.WINDOWS
        if system == "Darwin":
            return cls.MACOS
        if system == "Linux":
            return cls.LINUX
        return cls.OTHER

    @property
    def is_windows(self) -> bool:
        return self is Platform.WINDOWS


async def run_command(
    command: str,
    args: Sequence[str] = (),
    input: Optional[bytes] = None,
) -> str:
    """
    Run an external command and return its standard output.

    Args:
        command: Executable name or path
        args: Command arguments
        input: Bytes written to the process stdin (optional)

    Returns:
        Decoded stdout of the process

    Raises:
        CommandError: If the process cannot be started or exits non-zero
    """
    if not command:
        raise ValueError("command is required")

    argv = [command, *args]
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise CommandError(argv, None, str(e)) from e

    stdout, stderr = await process.communicate(input)
    out = stdout.decode("utf-8", errors="replace")
    err = stderr.decode("utf-8", errors="replace")

    if process.returncode != 0:
        raise CommandError(argv, process.returncode, err, out)

    return out
