"""DYMO LabelWriter Printer Driver for Linux/macOS/Windows."""

__version__ = "0.1.0"

from .config import (
    CharacterDeviceTarget,
    Interface,
    NetworkTarget,
    PrinterConfig,
    RawDeviceTarget,
    SpoolerTarget,
)
from .discovery import DiscoveredPrinter
from .errors import (
    CommandError,
    ConfigurationError,
    ImageError,
    InvalidArgumentError,
    NoPrinterFoundError,
    PrinterError,
    ProtocolError,
    TransportError,
    UnsupportedPlatformError,
)
from .image import create_image_with_text, load_image, to_bitmap
from .printer import DymoPrinter, quick_print
from .protocol import LabelGeometry, LabelWriterCommand, encode_bitmap
from .system import Platform

__all__ = [
    "DymoPrinter",
    "quick_print",
    "PrinterConfig",
    "Interface",
    "NetworkTarget",
    "SpoolerTarget",
    "RawDeviceTarget",
    "CharacterDeviceTarget",
    "DiscoveredPrinter",
    "Platform",
    "PrinterError",
    "InvalidArgumentError",
    "ImageError",
    "ConfigurationError",
    "NoPrinterFoundError",
    "TransportError",
    "CommandError",
    "ProtocolError",
    "UnsupportedPlatformError",
    "LabelWriterCommand",
    "LabelGeometry",
    "encode_bitmap",
    "create_image_with_text",
    "load_image",
    "to_bitmap",
]
