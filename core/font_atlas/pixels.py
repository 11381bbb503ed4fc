"""
Pixel buffers for font sheets.

Decoding is the only boundary with the outside world: encoded PNG/JPEG data
goes in, an immutable RGBA buffer comes out. Everything downstream reads the
buffer and never writes to it.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import cv2
import numpy as np
from PIL import Image

from .errors import ImageDecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PixelGrid:
    """Read-only RGBA pixel buffer of shape (height, width, 4)."""

    pixels: np.ndarray

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(f"Expected an RGBA buffer, got shape {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {self.pixels.dtype}")
        # Read-only view; the caller's own array keeps its flags
        view = self.pixels.view()
        view.flags.writeable = False
        object.__setattr__(self, "pixels", view)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """RGBA tuple at (x, y)."""
        r, g, b, a = self.pixels[y, x]
        return (int(r), int(g), int(b), int(a))

    def crop(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        """Copy of the rectangle at (x, y) as a writable RGBA array."""
        return self.pixels[y:y + height, x:x + width].copy()

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.array(self.pixels, dtype=np.uint8))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelGrid":
        """
        Build a grid from an RGB, RGBA or grayscale numpy array.

        The array is copied, so later changes by the caller do not leak in.
        """
        if array.ndim == 2:
            rgba = cv2.cvtColor(array.astype(np.uint8), cv2.COLOR_GRAY2RGBA)
        elif array.ndim == 3 and array.shape[2] == 3:
            rgba = cv2.cvtColor(array.astype(np.uint8), cv2.COLOR_RGB2RGBA)
        elif array.ndim == 3 and array.shape[2] == 4:
            rgba = array.astype(np.uint8, copy=True)
        else:
            raise ValueError(f"Unsupported pixel array shape: {array.shape}")
        return cls(np.ascontiguousarray(rgba))

    @classmethod
    def from_pil(cls, image: Image.Image) -> "PixelGrid":
        return cls(np.array(image.convert("RGBA"), dtype=np.uint8))


def _to_rgba(img: np.ndarray) -> np.ndarray:
    """Convert an OpenCV-decoded array (BGR/BGRA/gray) to RGBA."""
    if img.dtype != np.uint8:
        # 16-bit PNGs decode as uint16 with IMREAD_UNCHANGED
        img = (img / 257).astype(np.uint8)
    if len(img.shape) == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)


def decode_bytes(data: bytes) -> PixelGrid:
    """
    Decode an encoded raster (PNG/JPEG) held in memory.

    Raises:
        ImageDecodeError: If the data is not a decodable image
    """
    if not data:
        raise ImageDecodeError("Image data is empty")
    buffer = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageDecodeError("Could not decode image data")
    return PixelGrid(_to_rgba(img))


def decode_image(path: Path | str) -> PixelGrid:
    """
    Decode an image file into a PixelGrid.

    Args:
        path: Path to a PNG or JPEG sheet

    Returns:
        Immutable RGBA PixelGrid

    Raises:
        ImageDecodeError: If the file is missing or cannot be decoded
    """
    path = Path(path)
    if not path.is_file():
        raise ImageDecodeError(f"Image file not found: {path}")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageDecodeError(f"Could not read {path}: {e}") from e

    try:
        grid = decode_bytes(data)
    except ImageDecodeError as e:
        raise ImageDecodeError(f"Could not load image from {path}") from e

    logger.info(f"Decoded {path.name}: {grid.width}x{grid.height}")
    return grid


async def decode_image_async(path: Path | str) -> PixelGrid:
    """Decode an image off the event loop; resolves once decoding completes."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, decode_image, path)
