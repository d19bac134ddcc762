"""
Printer configuration and delivery targets.

A configuration is immutable. Auto-discovery never writes the printer it
found back into the configuration; it produces a new target instead.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from .errors import ConfigurationError


DEFAULT_HOST = "localhost"
DEFAULT_PORT = 9100
DEFAULT_TIMEOUT = 30.0

# Discovery selects the first installed printer whose name contains this
DEFAULT_MATCH = "dymo"

DEFAULT_RAW_PRINT_HELPER = "RawPrint.exe"


class Interface(str, Enum):
    """Supported ways of reaching the printer."""
    NETWORK = "NETWORK"  # Raw TCP socket (port 9100)
    CUPS = "CUPS"        # System print spooler (lp)
    WINDOWS = "WINDOWS"  # Vendor raw print helper
    DEVICE = "DEVICE"    # Character device, e.g. /dev/usb/lp0


@dataclass(frozen=True)
class NetworkTarget:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


@dataclass(frozen=True)
class SpoolerTarget:
    device_id: str


@dataclass(frozen=True)
class RawDeviceTarget:
    device_id: str


@dataclass(frozen=True)
class CharacterDeviceTarget:
    path: str


PrinterTarget = Union[NetworkTarget, SpoolerTarget, RawDeviceTarget, CharacterDeviceTarget]


@dataclass(frozen=True)
class PrinterConfig:
    """
    Printer connection settings.

    Attributes:
        interface: How to reach the printer, None to auto-discover
        host: Network printer host (NETWORK, default localhost)
        port: Network printer port (NETWORK, default 9100)
        device_id: Spooler queue or Windows printer name (CUPS, WINDOWS)
        device: Device file path (DEVICE)
        match: Name substring used to pick a printer during discovery
        timeout: Network connect/write timeout in seconds
        raw_print_helper: Executable used for WINDOWS raw printing
    """
    interface: Optional[Interface] = None
    host: Optional[str] = None
    port: Optional[int] = None
    device_id: Optional[str] = None
    device: Optional[str] = None
    match: str = DEFAULT_MATCH
    timeout: float = DEFAULT_TIMEOUT
    raw_print_helper: str = DEFAULT_RAW_PRINT_HELPER

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "PrinterConfig":
        """
        Build a configuration from a plain mapping.

        Accepts both ``deviceId`` and ``device_id`` spellings.

        Raises:
            ConfigurationError: If the interface is unknown or a value is invalid
        """
        data = dict(data or {})

        interface = data.get("interface")
        if interface:
            interface = parse_interface(interface)
        else:
            interface = None

        port = data.get("port")
        if port is not None:
            try:
                port = int(port)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid port: {port!r}") from None
            if not 0 < port < 65536:
                raise ConfigurationError(f"Port out of range: {port}")

        timeout = data.get("timeout", DEFAULT_TIMEOUT)
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid timeout: {timeout!r}") from None
        if timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive: {timeout}")

        return cls(
            interface=interface,
            host=data.get("host") or None,
            port=port,
            device_id=data.get("device_id") or data.get("deviceId") or None,
            device=data.get("device") or None,
            match=data.get("match") or DEFAULT_MATCH,
            timeout=timeout,
            raw_print_helper=data.get("raw_print_helper") or DEFAULT_RAW_PRINT_HELPER,
        )

    def target(self) -> Optional[PrinterTarget]:
        """
        Get the configured delivery target.

        Returns:
            The concrete target, or None when the printer must be discovered

        Raises:
            ConfigurationError: If a field required by the interface is missing
        """
        if self.interface is None:
            return None

        if self.interface is Interface.NETWORK:
            return NetworkTarget(self.host or DEFAULT_HOST, self.port or DEFAULT_PORT)

        if self.interface is Interface.CUPS:
            if not self.device_id:
                raise ConfigurationError("Cannot print to CUPS printer, deviceId is not configured")
            return SpoolerTarget(self.device_id)

        if self.interface is Interface.WINDOWS:
            if not self.device_id:
                raise ConfigurationError("Cannot print to Windows printer, deviceId is not configured")
            return RawDeviceTarget(self.device_id)

        if not self.device:
            raise ConfigurationError("Cannot write to device, the device name is empty")
        return CharacterDeviceTarget(self.device)


def parse_interface(value: Union[str, Interface]) -> Interface:
    """Parse an interface name, case-insensitively."""
    if isinstance(value, Interface):
        return value
    try:
        return Interface(str(value).upper())
    except ValueError:
        valid = ", ".join(i.value for i in Interface)
        raise ConfigurationError(
            f'Invalid interface "{value}", valid interfaces are: {valid}'
        ) from None
