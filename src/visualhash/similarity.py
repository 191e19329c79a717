"""Hamming-distance comparison of hash bit strings."""

import logging
import time
from typing import List, Union

import numpy as np

from .errors import AlgorithmMismatch, InvalidInput, LengthMismatch
from .models import AlgorithmId, HashDescriptor, Severity, SimilarityResult

logger = logging.getLogger(__name__)

# Similarity above LOW_SEVERITY_FLOOR is a low-severity change, above
# MEDIUM_SEVERITY_FLOOR a medium one, anything else high.
LOW_SEVERITY_FLOOR = 0.8
MEDIUM_SEVERITY_FLOOR = 0.6

_BITS = frozenset("01")


def _as_array(bits: str) -> np.ndarray:
    if not _BITS.issuperset(bits):
        raise InvalidInput("Hash bit strings may only contain '0' and '1'")
    return np.frombuffer(bits.encode("ascii"), dtype=np.uint8)


def classify_severity(similarity: float) -> Severity:
    if similarity > LOW_SEVERITY_FLOOR:
        return Severity.LOW
    if similarity > MEDIUM_SEVERITY_FLOOR:
        return Severity.MEDIUM
    return Severity.HIGH


def differing_positions(bits_a: str, bits_b: str) -> List[int]:
    """Indices where two equal-length bit strings disagree, ascending."""
    if len(bits_a) != len(bits_b):
        raise LengthMismatch(len(bits_a), len(bits_b))
    return np.flatnonzero(_as_array(bits_a) != _as_array(bits_b)).tolist()


def hamming_distance(bits_a: str, bits_b: str) -> int:
    """Compute Hamming distance between two bit strings."""
    if len(bits_a) != len(bits_b):
        raise LengthMismatch(len(bits_a), len(bits_b))
    return int(np.sum(_as_array(bits_a) != _as_array(bits_b)))


def compare_bits(bits_a: str, bits_b: str, algorithm: Union[AlgorithmId, str]) -> SimilarityResult:
    """
    Compare two bit strings of equal length.

    Args:
        bits_a: First hash as '0'/'1' characters
        bits_b: Second hash as '0'/'1' characters
        algorithm: Label carried into the result

    Returns:
        SimilarityResult with similarity = 1 - hamming / length

    Raises:
        LengthMismatch: if the strings differ in length
        InvalidInput: if either string holds anything but '0' and '1'
    """
    start = time.perf_counter_ns()
    label = algorithm.value if isinstance(algorithm, AlgorithmId) else str(algorithm)

    if len(bits_a) != len(bits_b):
        raise LengthMismatch(len(bits_a), len(bits_b))
    if not _BITS.issuperset(bits_a) or not _BITS.issuperset(bits_b):
        raise InvalidInput("Hash bit strings may only contain '0' and '1'")

    if bits_a == bits_b:
        return SimilarityResult(
            identical=True,
            similarity=1.0,
            algorithm=label,
            duration_micros=(time.perf_counter_ns() - start) // 1000,
        )

    positions = differing_positions(bits_a, bits_b)
    similarity = 1.0 - len(positions) / len(bits_a)

    return SimilarityResult(
        identical=False,
        similarity=similarity,
        algorithm=label,
        differing_bit_count=len(positions),
        differing_bit_positions=tuple(positions),
        severity=classify_severity(similarity),
        duration_micros=(time.perf_counter_ns() - start) // 1000,
    )


def compare_hashes(hash_a: HashDescriptor, hash_b: HashDescriptor) -> SimilarityResult:
    """
    Compare two descriptors produced by the same algorithm.

    Raises:
        LengthMismatch: if their bit strings differ in length, checked first
        AlgorithmMismatch: if equal-length descriptors come from different algorithms
    """
    if hash_a.bit_length != hash_b.bit_length:
        raise LengthMismatch(hash_a.bit_length, hash_b.bit_length)
    if hash_a.algorithm != hash_b.algorithm:
        raise AlgorithmMismatch(hash_a.algorithm.value, hash_b.algorithm.value)

    result = compare_bits(hash_a.bits, hash_b.bits, hash_a.algorithm)
    logger.debug(
        f"{result.algorithm}: similarity={result.similarity:.4f}, "
        f"{result.differing_bit_count}/{hash_a.bit_length} bits differ"
    )
    return result
