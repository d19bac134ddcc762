"""
Image Processing for DYMO LabelWriter printers.

Converts rendered label images to the packed 1-bit bitmap the printer
expects: one list entry per scanline, MSB is the leftmost pixel, a set
bit burns a dot.
"""

from io import BytesIO
from pathlib import Path
from typing import Iterator, Union

from PIL import Image, ImageChops, ImageDraw, ImageFont

from .errors import ImageError, InvalidArgumentError

# Image size limits to prevent memory exhaustion from malicious/malformed images
MAX_IMAGE_DIMENSION = 10000  # Maximum width or height in pixels
MAX_IMAGE_PIXELS = 10_000_000  # Maximum total pixels (10 megapixels)

# Pixels darker than this after conversion are printed
BLACK_THRESHOLD = 50

# Lightens the image before dithering so light grey backgrounds drop out
BRIGHTNESS = 0.3

# 4x4 ordered dither offsets (RGB565 threshold map), indexed [y % 4][x % 4]
DITHER_MATRIX = (
    1, 9, 3, 11,
    13, 5, 15, 7,
    4, 12, 2, 10,
    16, 8, 14, 6,
)

# Luminance weights used for greyscale conversion (ITU-R BT.709)
GREYSCALE_WEIGHTS = (0.2126, 0.7152, 0.0722)

FONT_SIZES = (8, 10, 12, 14, 16, 32, 64, 128)

ImageSource = Union[str, Path, bytes, Image.Image]


def load_image(source: ImageSource) -> Image.Image:
    """
    Load an image from various sources.

    Args:
        source: File path, bytes, or PIL Image

    Returns:
        PIL Image object

    Raises:
        ImageError: If the image cannot be loaded or exceeds size limits
    """
    if isinstance(source, Image.Image):
        img = source
    elif isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise ImageError(f"Image file not found: {path}")
        try:
            img = Image.open(path)
            img.load()
        except OSError as e:
            raise ImageError(f"Failed to load image: {e}") from e
    elif isinstance(source, bytes):
        try:
            img = Image.open(BytesIO(source))
            img.load()
        except OSError as e:
            raise ImageError(f"Failed to load image: {e}") from e
    else:
        raise ImageError(f"Unsupported image type: {type(source)}")

    if img.width > MAX_IMAGE_DIMENSION or img.height > MAX_IMAGE_DIMENSION:
        raise ImageError(
            f"Image dimensions ({img.width}x{img.height}) exceed maximum "
            f"({MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION})"
        )
    if img.width * img.height > MAX_IMAGE_PIXELS:
        raise ImageError(
            f"Image pixel count ({img.width * img.height:,}) exceeds "
            f"maximum ({MAX_IMAGE_PIXELS:,})"
        )

    return img


def rotate_for_printing(image: Image.Image) -> Image.Image:
    """
    Rotate a landscape label image 90 degrees counter-clockwise.

    The LabelWriter feeds labels short edge first, so the print head
    covers the label height. Width and height swap exactly.
    """
    _check_image(image)
    return image.transpose(Image.Transpose.ROTATE_90)


def create_image_with_text(
    width: int,
    height: int,
    margin: int,
    font_size: int,
    text: str,
) -> Image.Image:
    """
    Render text on a white label image.

    Text is left aligned, vertically centred and wrapped at word
    boundaries to fit between the left and right margin.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        margin: Horizontal margin in pixels (inside the image width)
        font_size: One of FONT_SIZES
        text: Text to print, newlines start a new line

    Returns:
        RGB image

    Raises:
        InvalidArgumentError: On invalid dimensions, font size or empty text
    """
    if not isinstance(width, int) or width <= 0:
        raise InvalidArgumentError(f"Image width should be a positive integer: {width!r}")
    if not isinstance(height, int) or height <= 0:
        raise InvalidArgumentError(f"Image height should be a positive integer: {height!r}")
    if not isinstance(margin, int) or margin < 0:
        raise InvalidArgumentError(f"Margin should be a positive integer or 0: {margin!r}")
    if font_size not in FONT_SIZES:
        raise InvalidArgumentError(
            f"Invalid font size: {font_size!r} (valid: {', '.join(map(str, FONT_SIZES))})"
        )
    if not text:
        raise InvalidArgumentError("Empty text, nothing to print")

    max_text_width = width - 2 * margin
    if max_text_width <= 0:
        raise InvalidArgumentError(f"Margin {margin} leaves no room for text on a {width}px label")

    font = ImageFont.load_default(size=font_size)
    img = Image.new("RGB", (width, height), color=(255, 255, 255))
    draw = ImageDraw.Draw(img)

    block = "\n".join(_wrap_text(draw, font, text, max_text_width))
    left, top, right, bottom = draw.multiline_textbbox((0, 0), block, font=font)
    y = (height - (bottom - top)) // 2 - top

    draw.multiline_text((margin, y), block, fill=(0, 0, 0), font=font)

    return img


def _wrap_text(draw: ImageDraw.ImageDraw, font, text: str, max_width: int) -> list[str]:
    """Greedy word wrap; a single word wider than max_width gets its own line."""
    lines = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if current and draw.textlength(candidate, font=font) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


def to_monochrome(image: Image.Image) -> Image.Image:
    """
    Convert an image to black and white ("L" mode, values 0 or 255).

    Steps, in order: drop alpha, greyscale, brighten, ordered dither,
    posterize to two levels.
    """
    _check_image(image)

    # Opacity: alpha is ignored, colour channels are kept as they are
    rgb = image.convert("RGB")
    grey = _greyscale(rgb)
    grey = grey.point(lambda v: int(v + (255 - v) * BRIGHTNESS))
    grey = ImageChops.add(grey, _dither_layer(grey.size))

    # Two levels: anything short of full white becomes black
    return grey.point(lambda v: 255 if v >= 255 else 0)


def _greyscale(image: Image.Image) -> Image.Image:
    """Weighted greyscale of an RGB image, fractions truncated (not rounded)."""
    wr, wg, wb = GREYSCALE_WEIGHTS
    grey = Image.new("L", image.size)
    grey.putdata([int(wr * r + wg * g + wb * b) for r, g, b in image.getdata()])
    return grey


def _dither_layer(size: tuple[int, int]) -> Image.Image:
    """Tile the dither matrix over an image of the given size."""
    tile = Image.new("L", (4, 4))
    tile.putdata(DITHER_MATRIX)

    layer = Image.new("L", size)
    width, height = size
    for y in range(0, height, 4):
        for x in range(0, width, 4):
            layer.paste(tile, (x, y))
    return layer


def to_bitmap(image: Image.Image) -> list[bytes]:
    """
    Convert a rendered image to a packed bitmap.

    Args:
        image: Full colour or greyscale PIL image

    Returns:
        One bytes object per scanline, top line first, each
        ceil(width / 8) bytes long

    Raises:
        ImageError: If image is missing or not a PIL image
    """
    return list(iter_rows(to_monochrome(image)))


def iter_rows(image: Image.Image) -> Iterator[bytes]:
    """
    Iterate over the rows of a black and white image as packed bytes.

    Pixels with a value below BLACK_THRESHOLD set their bit. Unused bits
    at the end of a row stay 0.
    """
    _check_image(image)
    if image.mode != "L":
        image = image.convert("L")

    width = image.width
    height = image.height
    bytes_per_row = (width + 7) // 8
    pixels = image.load()

    for y in range(height):
        row = bytearray(bytes_per_row)
        for x in range(width):
            if pixels[x, y] < BLACK_THRESHOLD:
                row[x // 8] |= 1 << (7 - x % 8)
        yield bytes(row)


def unpack_row(row: bytes, width: int) -> list[bool]:
    """Decode a packed row back to pixels (True is black)."""
    return [bool(row[x // 8] & (1 << (7 - x % 8))) for x in range(width)]


def _check_image(image) -> None:
    if image is None:
        raise ImageError("Image is required")
    if not isinstance(image, Image.Image):
        raise ImageError(f"Expected a PIL image, got {type(image).__name__}")
