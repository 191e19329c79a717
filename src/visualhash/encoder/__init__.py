from .preprocess import PixelBuffer, PixelSource, PillowPixelSource
from .phash import (
    ALGORITHMS,
    ThresholdPolicy,
    encode_bits,
    generate_hash,
    quick_hash,
    perceptual_hash,
    detailed_hash,
)

__all__ = [
    "PixelBuffer",
    "PixelSource",
    "PillowPixelSource",
    "ALGORITHMS",
    "ThresholdPolicy",
    "encode_bits",
    "generate_hash",
    "quick_hash",
    "perceptual_hash",
    "detailed_hash",
]
