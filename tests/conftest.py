"""Shared fixtures: synthetic images and an instrumented pixel source."""

from io import BytesIO
import os
from typing import Dict, List, Optional, Tuple
import zlib

import numpy as np
import pytest
from PIL import Image, ImageDraw

from visualhash.encoder.preprocess import PixelBuffer


def png_bytes(image: Image.Image) -> bytes:
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def noise_image(seed: int, size: Tuple[int, int] = (96, 96)) -> bytes:
    """Random RGB noise, reproducible per seed."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(size[1], size[0], 3), dtype=np.uint8)
    return png_bytes(Image.fromarray(pixels))


def split_image(dark_left: bool = True, size: Tuple[int, int] = (64, 64)) -> bytes:
    """Half black, half white."""
    img = Image.new("RGB", size, (255, 255, 255))
    draw = ImageDraw.Draw(img)
    half = size[0] // 2
    box = [0, 0, half - 1, size[1] - 1] if dark_left else [half, 0, size[0] - 1, size[1] - 1]
    draw.rectangle(box, fill=(0, 0, 0))
    return png_bytes(img)


class CountingPixelSource:
    """
    Pixel source that never decodes anything.

    Buffers listed in `grids` return that exact array; any other buffer gets
    random pixels seeded from its CRC, so equal buffers give equal grids.
    Every request is recorded in `calls`.
    """

    def __init__(self, grids: Optional[Dict[bytes, np.ndarray]] = None):
        self.grids = grids or {}
        self.calls: List[Tuple[bytes, int, int, bool, Optional[float]]] = []

    def decode_resize(self, buffer, width, height, grayscale=True, blur=None):
        self.calls.append((buffer, width, height, grayscale, blur))
        if buffer in self.grids:
            return PixelBuffer(np.asarray(self.grids[buffer], dtype=np.uint8))

        rng = np.random.default_rng(zlib.crc32(buffer))
        shape = (height, width) if grayscale else (height, width, 3)
        return PixelBuffer(rng.integers(0, 256, size=shape, dtype=np.uint8))

    def sizes_requested(self) -> List[Tuple[int, int]]:
        return [(width, height) for _, width, height, _, _ in self.calls]


@pytest.fixture()
def counting_source() -> CountingPixelSource:
    return CountingPixelSource()


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch):
    """Keep VISUALHASH_* variables from the host out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("VISUALHASH_"):
            monkeypatch.delenv(name, raising=False)
