"""Progressive multi-level visual similarity hashing."""

from .errors import (
    VisualHashError,
    InvalidInput,
    UnknownAlgorithm,
    HashComparisonError,
    LengthMismatch,
    AlgorithmMismatch,
)
from .models import (
    AlgorithmId,
    Severity,
    HashDescriptor,
    SimilarityResult,
    TierConfig,
    SemanticTierConfig,
    MultiLevelConfig,
    EscalationOutcome,
    SemanticAnalysis,
)
from .config import HasherSettings, default_config
from .encoder import PixelBuffer, PixelSource, PillowPixelSource, generate_hash, quick_hash, perceptual_hash, detailed_hash
from .similarity import compare_bits, compare_hashes, hamming_distance, classify_severity
from .progressive import VisualHasher, SemanticAnalyzer, progressive_compare, aprogressive_compare

__version__ = "0.1.0"

__all__ = [
    "VisualHashError",
    "InvalidInput",
    "UnknownAlgorithm",
    "HashComparisonError",
    "LengthMismatch",
    "AlgorithmMismatch",
    "AlgorithmId",
    "Severity",
    "HashDescriptor",
    "SimilarityResult",
    "TierConfig",
    "SemanticTierConfig",
    "MultiLevelConfig",
    "EscalationOutcome",
    "SemanticAnalysis",
    "HasherSettings",
    "default_config",
    "PixelBuffer",
    "PixelSource",
    "PillowPixelSource",
    "generate_hash",
    "quick_hash",
    "perceptual_hash",
    "detailed_hash",
    "compare_bits",
    "compare_hashes",
    "hamming_distance",
    "classify_severity",
    "VisualHasher",
    "SemanticAnalyzer",
    "progressive_compare",
    "aprogressive_compare",
]
