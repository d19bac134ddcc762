"""
Delivery of print jobs to the printer.

One job goes to exactly one target: a raw TCP socket, the CUPS spooler,
the Windows raw print helper or a character device. Without a
configured target the printer is discovered once, never retried.
"""

import asyncio
import os
import tempfile
from typing import Awaitable, Callable, Optional

from .config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_RAW_PRINT_HELPER,
    DEFAULT_TIMEOUT,
    CharacterDeviceTarget,
    NetworkTarget,
    PrinterConfig,
    PrinterTarget,
    RawDeviceTarget,
    SpoolerTarget,
)
from .discovery import find_printer, list_printers
from .errors import NoPrinterFoundError, TransportError
from .system import Platform, run_command

Runner = Callable[..., Awaitable[str]]
Logger = Callable[[str], None]


def _no_log(message: str):
    pass


async def resolve_target(
    config: PrinterConfig,
    platform: Platform,
    run: Runner = run_command,
    log: Optional[Logger] = None,
) -> PrinterTarget:
    """
    Get the delivery target for a configuration.

    The configured target is used as is. Otherwise the installed printers
    are listed and the first one matching config.match is used: through
    the spooler, or the raw print helper on Windows.

    Raises:
        NoPrinterFoundError: If no installed printer matches
    """
    log = log or _no_log

    target = config.target()
    if target is not None:
        return target

    log(f"No printer configured, looking for '{config.match}'...")
    printers = await list_printers(platform, run)
    log(f"Found {len(printers)} installed printer(s)")

    printer = find_printer(printers, config.match)
    if printer is None:
        raise NoPrinterFoundError(
            f"Cannot find a printer matching '{config.match}'. Try to configure manually."
        )

    log(f"Using {printer}")
    if platform.is_windows:
        return RawDeviceTarget(printer.device_id)
    return SpoolerTarget(printer.device_id)


async def send_to_network(
    buffer: bytes,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    timeout: float = DEFAULT_TIMEOUT,
):
    """
    Send data to a network printer (raw TCP, e.g. port 9100).

    Raises:
        TransportError: On connection errors or when connecting or
            writing takes longer than timeout seconds
    """
    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout
        )
    except asyncio.TimeoutError:
        raise TransportError(f"Timeout connecting to printer at {host}:{port}") from None
    except OSError as e:
        raise TransportError(f"Failed to connect to {host}:{port}: {e}") from e

    try:
        writer.write(buffer)
        await asyncio.wait_for(writer.drain(), timeout=timeout)
    except asyncio.TimeoutError:
        # Unsent data would keep a graceful close waiting forever
        writer.transport.abort()
        raise TransportError(f"Timeout sending data to printer at {host}:{port}") from None
    except OSError as e:
        writer.transport.abort()
        raise TransportError(f"Failed to send data to {host}:{port}: {e}") from e

    writer.close()
    try:
        await asyncio.wait_for(writer.wait_closed(), timeout=timeout)
    except asyncio.TimeoutError:
        writer.transport.abort()
        raise TransportError(f"Timeout closing connection to printer at {host}:{port}") from None
    except OSError:
        pass


async def send_to_spooler(buffer: bytes, device_id: str, run: Runner = run_command):
    """Submit data as a raw job to a CUPS queue with lp."""
    if not device_id:
        raise TransportError("Cannot print to CUPS printer, deviceId is not configured")
    await run("lp", ["-d", device_id], buffer)


async def send_to_raw_device(
    buffer: bytes,
    device_id: str,
    helper: str = DEFAULT_RAW_PRINT_HELPER,
    run: Runner = run_command,
):
    """
    Send data to a Windows printer with a raw print helper.

    The helper is called as ``helper <device_id> <file>``; the temporary
    file is removed whatever the outcome.
    """
    if not device_id:
        raise TransportError("Cannot print to Windows printer, deviceId is not configured")

    try:
        fd, path = tempfile.mkstemp(prefix="dymo.", suffix=".prn")
    except OSError as e:
        raise TransportError(f"Failed to create print file: {e}") from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(buffer)
        await run(helper, [device_id, path])
    except OSError as e:
        raise TransportError(f"Failed to write print file {path}: {e}") from e
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


def _write_device(path: str, buffer: bytes):
    with open(path, "wb") as f:
        f.write(buffer)


async def send_to_device(buffer: bytes, path: str):
    """Write data to a printer device file such as /dev/usb/lp0."""
    if not path:
        raise TransportError("Cannot write to device, the device name is empty")
    try:
        await asyncio.to_thread(_write_device, path, buffer)
    except OSError as e:
        raise TransportError(f"Failed to write to {path}: {e}") from e


async def deliver(
    buffer: bytes,
    target: PrinterTarget,
    timeout: float = DEFAULT_TIMEOUT,
    helper: str = DEFAULT_RAW_PRINT_HELPER,
    run: Runner = run_command,
    log: Optional[Logger] = None,
):
    """Send a finished print job to the given target."""
    log = log or _no_log
    log(f"Sending {len(buffer)} bytes to {target}")

    if isinstance(target, NetworkTarget):
        await send_to_network(buffer, target.host, target.port, timeout)
    elif isinstance(target, SpoolerTarget):
        await send_to_spooler(buffer, target.device_id, run)
    elif isinstance(target, RawDeviceTarget):
        await send_to_raw_device(buffer, target.device_id, helper, run)
    elif isinstance(target, CharacterDeviceTarget):
        await send_to_device(buffer, target.path)
    else:
        raise TypeError(f"Unknown printer target: {target!r}")


async def dispatch(
    buffer: bytes,
    config: PrinterConfig,
    platform: Platform,
    run: Runner = run_command,
    log: Optional[Logger] = None,
) -> PrinterTarget:
    """
    Resolve the target for config and deliver the job to it.

    Returns:
        The target the job was sent to
    """
    target = await resolve_target(config, platform, run, log)
    await deliver(buffer, target, config.timeout, config.raw_print_helper, run, log)
    return target
