"""Exceptions raised by the hashing engine.

All of them are local contract violations: nothing is retried, and the
caller decides whether to skip, abort or report.
"""


class VisualHashError(Exception):
    """Base class for all visualhash errors."""


class InvalidInput(VisualHashError, ValueError):
    """Empty, undecodable or undersized image data, or a bad sampling size."""


class UnknownAlgorithm(VisualHashError, ValueError):
    """The algorithm identifier does not name a known hashing algorithm."""

    def __init__(self, algorithm):
        self.algorithm = algorithm
        super().__init__(f"Unknown hashing algorithm: {algorithm!r}")


class HashComparisonError(VisualHashError, ValueError):
    """Two hashes cannot be compared."""


class LengthMismatch(HashComparisonError):
    """Hash bit strings have different lengths."""

    def __init__(self, length_a: int, length_b: int):
        self.length_a = length_a
        self.length_b = length_b
        super().__init__(
            f"Hash lengths must be equal for Hamming distance calculation "
            f"(got {length_a} and {length_b})"
        )


class AlgorithmMismatch(HashComparisonError):
    """Hashes were produced by different algorithms."""

    def __init__(self, algorithm_a: str, algorithm_b: str):
        self.algorithm_a = algorithm_a
        self.algorithm_b = algorithm_b
        super().__init__(f"Cannot compare {algorithm_a} hash with {algorithm_b} hash")
