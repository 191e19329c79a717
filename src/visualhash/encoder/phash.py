"""Perceptual hashing for visual-regression comparisons.

Each algorithm pairs a sampling grid, a transform kernel and a
thresholding policy. The resulting bit strings are compared with
Hamming distance, so both images must go through the same
(algorithm, size) combination.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import InvalidInput
from ..models import AlgorithmId, HashDescriptor
from . import kernels
from .preprocess import PillowPixelSource, PixelBuffer, PixelSource

logger = logging.getLogger(__name__)

# Noise reduction applied before the advanced DCT
ADVANCED_BLUR_RADIUS = 1

# Mid-scale cut-off for channel means
COLOR_THRESHOLD = 128.0


class ThresholdPolicy(str, Enum):
    MEAN = "mean"
    MEDIAN = "median"
    FIXED = "fixed"


def median(values: Sequence[float]) -> float:
    """Median by full sort; even lengths average the two central values."""
    return float(np.median(np.asarray(values, dtype=np.float64)))


def encode_bits(
    coefficients: Sequence[float],
    policy: ThresholdPolicy,
    threshold: Optional[float] = None,
) -> str:
    """
    Turn coefficients into a bit string.

    Each coefficient becomes '1' if strictly greater than the statistic
    chosen by the policy (global mean, median, or the fixed threshold).

    Raises:
        InvalidInput: on an empty coefficient sequence
    """
    values = np.asarray(coefficients, dtype=np.float64)
    if values.size == 0:
        raise InvalidInput("Cannot encode an empty coefficient sequence")

    if policy == ThresholdPolicy.MEAN:
        statistic = float(values.mean())
    elif policy == ThresholdPolicy.MEDIAN:
        statistic = median(values)
    else:
        if threshold is None:
            raise ValueError("Fixed threshold policy needs a threshold")
        statistic = threshold

    return "".join("1" if bit else "0" for bit in values > statistic)


@dataclass(frozen=True)
class AlgorithmSpec:
    """How one algorithm samples, transforms and thresholds an image."""
    kernel: Callable[[PixelBuffer, int], np.ndarray]
    policy: ThresholdPolicy
    confidence: float
    grid: Callable[[int], Tuple[int, int]] = lambda n: (n, n)
    grayscale: bool = True
    blur: Optional[float] = None
    fixed_threshold: Optional[float] = None
    min_size: int = 1
    metadata: Dict[str, Any] = field(default_factory=dict)


ALGORITHMS: Dict[AlgorithmId, AlgorithmSpec] = {
    AlgorithmId.AVERAGE: AlgorithmSpec(
        kernel=kernels.average_kernel,
        policy=ThresholdPolicy.MEAN,
        confidence=1.0,
    ),
    AlgorithmId.DIFFERENCE: AlgorithmSpec(
        kernel=kernels.difference_kernel,
        policy=ThresholdPolicy.FIXED,
        fixed_threshold=0.0,
        confidence=1.0,
        grid=lambda n: (n + 1, n),
    ),
    AlgorithmId.PERCEPTUAL: AlgorithmSpec(
        kernel=kernels.perceptual_kernel,
        policy=ThresholdPolicy.MEDIAN,
        confidence=1.0,
    ),
    AlgorithmId.ADVANCED_PERCEPTUAL: AlgorithmSpec(
        kernel=kernels.advanced_perceptual_kernel,
        policy=ThresholdPolicy.MEAN,
        confidence=0.95,
        blur=ADVANCED_BLUR_RADIUS,
    ),
    AlgorithmId.WAVELET: AlgorithmSpec(
        kernel=kernels.wavelet_kernel,
        policy=ThresholdPolicy.MEDIAN,
        confidence=0.92,
        min_size=2,
    ),
    AlgorithmId.BLOCK: AlgorithmSpec(
        kernel=kernels.block_kernel,
        policy=ThresholdPolicy.MEAN,
        confidence=0.90,
        grid=lambda n: (n * kernels.BLOCK_SIZE, n * kernels.BLOCK_SIZE),
    ),
    AlgorithmId.STRUCTURAL: AlgorithmSpec(
        kernel=kernels.gradient_kernel,
        policy=ThresholdPolicy.MEDIAN,
        confidence=0.88,
        min_size=3,
        metadata={"structural_features": True},
    ),
    AlgorithmId.COLOR_HISTOGRAM: AlgorithmSpec(
        kernel=kernels.color_histogram_kernel,
        policy=ThresholdPolicy.FIXED,
        fixed_threshold=COLOR_THRESHOLD,
        confidence=0.85,
        grayscale=False,
        metadata={"color_analysis": True},
    ),
    AlgorithmId.GRADIENT: AlgorithmSpec(
        kernel=kernels.gradient_kernel,
        policy=ThresholdPolicy.MEDIAN,
        confidence=0.87,
        min_size=3,
        metadata={"gradient_analysis": True},
    ),
}

_default_source = PillowPixelSource()


def generate_hash(
    image: bytes,
    algorithm: Union[AlgorithmId, str],
    size: int = 8,
    pixel_source: Optional[PixelSource] = None,
) -> HashDescriptor:
    """
    Hash an encoded image with one algorithm.

    Args:
        image: Encoded image bytes
        algorithm: Algorithm identifier (enum member or name)
        size: Sampling grid dimension
        pixel_source: Decoder to use (defaults to Pillow)

    Returns:
        HashDescriptor whose bit length depends only on algorithm and size

    Raises:
        UnknownAlgorithm: if the algorithm is not recognized
        InvalidInput: on empty or undecodable image data, or a size the
            algorithm cannot work with
    """
    algorithm_id = AlgorithmId.resolve(algorithm)
    spec = ALGORITHMS[algorithm_id]

    if isinstance(size, bool) or not isinstance(size, int) or size < spec.min_size:
        raise InvalidInput(f"{algorithm_id.value} hash needs an integer size >= {spec.min_size}, got {size!r}")
    if not image:
        raise InvalidInput("Image buffer is empty")

    source = pixel_source or _default_source
    start = time.perf_counter_ns()

    width, height = spec.grid(size)
    pixels = source.decode_resize(image, width, height, grayscale=spec.grayscale, blur=spec.blur)
    coefficients = spec.kernel(pixels, size)
    bits = encode_bits(coefficients, spec.policy, spec.fixed_threshold)

    duration_micros = (time.perf_counter_ns() - start) // 1000
    logger.debug(f"{algorithm_id.value} hash (size={size}, {len(bits)} bits) in {duration_micros}us")

    return HashDescriptor(
        bits=bits,
        algorithm=algorithm_id,
        size=size,
        duration_micros=duration_micros,
        confidence=spec.confidence,
        metadata={"size": size, **spec.metadata},
    )


def quick_hash(image: bytes, pixel_source: Optional[PixelSource] = None) -> HashDescriptor:
    """Cheap 64-bit difference hash."""
    return generate_hash(image, AlgorithmId.DIFFERENCE, 8, pixel_source)


def perceptual_hash(image: bytes, pixel_source: Optional[PixelSource] = None) -> HashDescriptor:
    """Blurred DCT hash at 16x16."""
    return generate_hash(image, AlgorithmId.ADVANCED_PERCEPTUAL, 16, pixel_source)


def detailed_hash(image: bytes, pixel_source: Optional[PixelSource] = None) -> HashDescriptor:
    """Structural gradient hash at 32x32."""
    return generate_hash(image, AlgorithmId.STRUCTURAL, 32, pixel_source)
