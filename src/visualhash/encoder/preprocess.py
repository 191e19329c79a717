"""Image decoding and resampling into fixed-size pixel grids."""

from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Protocol
import logging

import numpy as np
from PIL import Image, ImageFilter, UnidentifiedImageError

from ..errors import InvalidInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Read-only grid of 8-bit samples.

    Shape is (height, width) for grayscale or (height, width, 3) for RGB.
    """
    pixels: np.ndarray

    def __post_init__(self):
        pixels = np.asarray(self.pixels)
        if pixels.dtype != np.uint8:
            raise InvalidInput(f"Pixel data must be uint8, got {pixels.dtype}")
        if pixels.ndim not in (2, 3) or (pixels.ndim == 3 and pixels.shape[2] != 3):
            raise InvalidInput(f"Unsupported pixel grid shape {pixels.shape}")

        pixels = pixels.copy()
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else self.pixels.shape[2]


class PixelSource(Protocol):
    """Anything that can turn encoded image bytes into a resized pixel grid."""

    def decode_resize(
        self,
        buffer: bytes,
        width: int,
        height: int,
        grayscale: bool = True,
        blur: Optional[float] = None,
    ) -> PixelBuffer:
        ...


class PillowPixelSource:
    """
    Default pixel source built on Pillow.

    Converts to grayscale or RGB, resizes with Lanczos resampling, then
    applies an optional Gaussian blur to the resized grid.
    """

    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS):
        self.resample = resample

    def decode_resize(
        self,
        buffer: bytes,
        width: int,
        height: int,
        grayscale: bool = True,
        blur: Optional[float] = None,
    ) -> PixelBuffer:
        """
        Decode an image and resample it to width x height.

        Args:
            buffer: Encoded image bytes (PNG, JPEG, ...)
            width: Target width in pixels
            height: Target height in pixels
            grayscale: Convert to a single luminance channel
            blur: Optional Gaussian blur radius applied after resizing

        Returns:
            PixelBuffer of shape (height, width) or (height, width, 3)

        Raises:
            InvalidInput: if the buffer is empty, cannot be decoded, or the
                target size is not positive
        """
        if not buffer:
            raise InvalidInput("Image buffer is empty")
        if width < 1 or height < 1:
            raise InvalidInput(f"Target size must be positive, got {width}x{height}")

        try:
            image = Image.open(BytesIO(buffer))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise InvalidInput(f"Could not decode image: {e}") from e

        image = image.convert("L" if grayscale else "RGB")
        image = image.resize((width, height), self.resample)

        if blur:
            image = image.filter(ImageFilter.GaussianBlur(radius=blur))

        logger.debug(f"Decoded image to {width}x{height} (grayscale={grayscale}, blur={blur})")
        return PixelBuffer(np.array(image, dtype=np.uint8))
