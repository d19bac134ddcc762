"""
Exception classes for the DYMO LabelWriter driver.

Configuration and input problems derive from InvalidArgumentError so a
caller can tell "fix my setup" apart from "the printer did not get the
data" (TransportError).
"""

from typing import Optional, Sequence


class PrinterError(Exception):
    """Base exception for all printer errors."""

    pass


class InvalidArgumentError(PrinterError, ValueError):
    """Bad caller input (empty bitmap, copy count, image dimensions...)."""

    pass


class ImageError(InvalidArgumentError):
    """Error loading or processing an image for printing."""

    pass


class ConfigurationError(InvalidArgumentError):
    """Invalid printer configuration."""

    pass


class NoPrinterFoundError(PrinterError):
    """Printer discovery completed without finding a matching printer."""

    pass


class TransportError(PrinterError):
    """Error delivering data to the printer."""

    pass


class CommandError(TransportError):
    """External command failed to start or exited with a non-zero status."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int],
        stderr: str = "",
        stdout: str = "",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout

        if returncode is None:
            message = f"Failed to run {self.command[0]}: {stderr}"
        else:
            message = f"{self.command[0]} exited with code {returncode}"
            details = "\n".join(part for part in (stderr.strip(), stdout.strip()) if part)
            if details:
                message = f"{message}:\n{details}"
        super().__init__(message)


class ProtocolError(PrinterError):
    """Label geometry does not fit the printer's command fields."""

    pass


class UnsupportedPlatformError(PrinterError):
    """Operation not available on this operating system."""

    pass
