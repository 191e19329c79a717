"""Transform kernels: pixel grids in, real-valued coefficients out.

Every kernel takes the PixelBuffer produced for its algorithm plus the
sampling size n, checks the grid shape, and returns a flat float64 array
whose length depends only on the algorithm and n.
"""

import numpy as np
from scipy.fftpack import dct

from ..errors import InvalidInput
from .preprocess import PixelBuffer

BLOCK_SIZE = 4
HISTOGRAM_BINS = 256


def _grid(buffer: PixelBuffer, height: int, width: int, channels: int = 1) -> np.ndarray:
    """Return the buffer as float64 after checking it matches the expected grid."""
    if buffer.pixels.size == 0:
        raise InvalidInput("Pixel buffer is empty")
    if (buffer.height, buffer.width, buffer.channels) != (height, width, channels):
        raise InvalidInput(
            f"Pixel grid {buffer.width}x{buffer.height}x{buffer.channels} does not match "
            f"the expected {width}x{height}x{channels}"
        )
    return buffer.pixels.astype(np.float64)


def average_kernel(buffer: PixelBuffer, n: int) -> np.ndarray:
    """One coefficient per pixel of the n x n grid."""
    return _grid(buffer, n, n).flatten()


def difference_kernel(buffer: PixelBuffer, n: int) -> np.ndarray:
    """Horizontal neighbour differences p(y, x) - p(y, x + 1) over an (n+1)-wide grid."""
    pixels = _grid(buffer, n, n + 1)
    return (pixels[:, :-1] - pixels[:, 1:]).flatten()


def dct_2d(pixels: np.ndarray) -> np.ndarray:
    """
    Unnormalized 2-D DCT-II of a square grid.

    Element [u, v] is sum over x, y of
    p[y, x] * cos((2x + 1) u pi / 2n) * cos((2y + 1) v pi / 2n),
    i.e. u is the horizontal frequency and v the vertical one.
    """
    # scipy's type-II DCT carries a factor of 2 per axis and indexes [row_freq, col_freq]
    return dct(dct(pixels, axis=0), axis=1).T / 4.0


def perceptual_kernel(buffer: PixelBuffer, n: int) -> np.ndarray:
    """Low-frequency min(8, n) x min(8, n) corner of the DCT."""
    coefficients = dct_2d(_grid(buffer, n, n))
    low = min(8, n)
    return coefficients[:low, :low].flatten()


def advanced_perceptual_kernel(buffer: PixelBuffer, n: int) -> np.ndarray:
    """
    First min(2n, n*n) DCT coefficients in raster order.

    Expects the grid to be blurred already. The selection walks the first
    rows of the coefficient matrix, not a zig-zag over the lowest
    frequencies.
    """
    coefficients = dct_2d(_grid(buffer, n, n))
    return coefficients.flatten()[:min(2 * n, n * n)]


def haar_wavelet(pixels: np.ndarray) -> np.ndarray:
    """
    In-place style Haar passes over row pairs.

    For step = 1, 2, 4, ... each row i (stepping by 2 * step) and row
    i + step are replaced by their half-sum and half-difference.
    """
    n = pixels.shape[0]
    result = pixels.astype(np.float64).copy()
    step = 1
    while step < n:
        first = result[0::2 * step].copy()
        second = result[step::2 * step].copy()
        result[0::2 * step] = (first + second) / 2
        result[step::2 * step] = (first - second) / 2
        step *= 2
    return result


def wavelet_kernel(buffer: PixelBuffer, n: int) -> np.ndarray:
    """Top-left (n/2) x (n/2) block of the Haar transform."""
    if n < 2 or n & (n - 1):
        raise InvalidInput(f"Wavelet hash needs a power-of-two size >= 2, got {n}")
    transformed = haar_wavelet(_grid(buffer, n, n))
    half = n // 2
    return transformed[:half, :half].flatten()


def block_kernel(buffer: PixelBuffer, n: int) -> np.ndarray:
    """Means of the 4x4 blocks tiling a 4n x 4n grid."""
    side = n * BLOCK_SIZE
    pixels = _grid(buffer, side, side)
    blocks = pixels.reshape(n, BLOCK_SIZE, n, BLOCK_SIZE)
    return blocks.mean(axis=(1, 3)).flatten()


def gradient_kernel(buffer: PixelBuffer, n: int) -> np.ndarray:
    """Gradient magnitude at the (n-2)^2 interior pixels, using central differences."""
    if n < 3:
        raise InvalidInput(f"Gradient hash needs size >= 3, got {n}")
    pixels = _grid(buffer, n, n)
    gx = pixels[1:-1, 2:] - pixels[1:-1, :-2]
    gy = pixels[2:, 1:-1] - pixels[:-2, 1:-1]
    return np.sqrt(gx * gx + gy * gy).flatten()


def color_histogram_kernel(buffer: PixelBuffer, n: int) -> np.ndarray:
    """Mean intensity of each RGB channel, taken from its 256-bin histogram."""
    pixels = _grid(buffer, n, n, channels=3).astype(np.uint8)
    levels = np.arange(HISTOGRAM_BINS, dtype=np.float64)

    means = []
    for channel in range(3):
        histogram = np.bincount(pixels[:, :, channel].ravel(), minlength=HISTOGRAM_BINS)
        means.append(float(np.dot(histogram, levels) / histogram.sum()))

    return np.array(means, dtype=np.float64)
