"""Tests for the Pillow pixel source."""

import numpy as np
import pytest
from PIL import Image

from visualhash.encoder.preprocess import PillowPixelSource
from visualhash.errors import InvalidInput

from conftest import png_bytes


def _checkerboard(size: int = 32, cell: int = 4) -> bytes:
    yy, xx = np.mgrid[0:size, 0:size]
    pixels = (((yy // cell) + (xx // cell)) % 2 * 255).astype(np.uint8)
    return png_bytes(Image.fromarray(pixels))


class TestPillowPixelSource:
    def test_grayscale_shape(self):
        buf = PillowPixelSource().decode_resize(_checkerboard(), 9, 8)
        assert buf.pixels.shape == (8, 9)
        assert buf.channels == 1

    def test_rgb_from_grayscale_source(self):
        buf = PillowPixelSource().decode_resize(_checkerboard(), 4, 4, grayscale=False)
        assert buf.pixels.shape == (4, 4, 3)

    def test_solid_colour_preserved(self):
        image = png_bytes(Image.new("RGB", (40, 30), (200, 100, 50)))
        buf = PillowPixelSource().decode_resize(image, 5, 5, grayscale=False)
        assert np.abs(buf.pixels[2, 2].astype(int) - [200, 100, 50]).max() <= 1

    def test_blur_smooths_pixels(self):
        source = PillowPixelSource()
        sharp = source.decode_resize(_checkerboard(), 32, 32)
        blurred = source.decode_resize(_checkerboard(), 32, 32, blur=1)
        assert blurred.pixels.astype(float).std() < sharp.pixels.astype(float).std()

    def test_deterministic(self):
        source = PillowPixelSource()
        first = source.decode_resize(_checkerboard(), 8, 8)
        second = source.decode_resize(_checkerboard(), 8, 8)
        assert np.array_equal(first.pixels, second.pixels)

    def test_empty_buffer(self):
        with pytest.raises(InvalidInput):
            PillowPixelSource().decode_resize(b"", 8, 8)

    def test_garbage_buffer(self):
        with pytest.raises(InvalidInput):
            PillowPixelSource().decode_resize(b"not an image", 8, 8)

    def test_non_positive_size(self):
        with pytest.raises(InvalidInput):
            PillowPixelSource().decode_resize(_checkerboard(), 0, 8)

    def test_decompression_bomb(self, monkeypatch):
        # 32x32 is more than twice the limit, so Pillow refuses to open it
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        with pytest.raises(InvalidInput):
            PillowPixelSource().decode_resize(_checkerboard(), 8, 8)
