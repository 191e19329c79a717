"""Pydantic models for hashes, comparisons and escalation configuration."""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import UnknownAlgorithm


class AlgorithmId(str, Enum):
    """Closed set of hashing algorithms."""

    AVERAGE = "average"
    DIFFERENCE = "difference"
    PERCEPTUAL = "perceptual"
    ADVANCED_PERCEPTUAL = "advanced-perceptual"
    WAVELET = "wavelet"
    BLOCK = "block"
    STRUCTURAL = "structural"
    COLOR_HISTOGRAM = "color-histogram"
    GRADIENT = "gradient"

    @classmethod
    def resolve(cls, name: Union["AlgorithmId", str]) -> "AlgorithmId":
        """
        Map an algorithm identifier to its enum member.

        Accepts enum members, canonical names, the short names used by
        older callers (``dhash``, ``phash``, ``blockhash``, ``colorhistogram``)
        and underscores in place of hyphens.

        Raises:
            UnknownAlgorithm: if the name is not recognized
        """
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise UnknownAlgorithm(name)

        key = name.strip().lower().replace("_", "-")
        try:
            return cls(key)
        except ValueError:
            pass

        if key in _ALIASES:
            return _ALIASES[key]
        raise UnknownAlgorithm(name)


_ALIASES = {
    "dhash": AlgorithmId.DIFFERENCE,
    "phash": AlgorithmId.PERCEPTUAL,
    "blockhash": AlgorithmId.BLOCK,
    "colorhistogram": AlgorithmId.COLOR_HISTOGRAM,
}


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class HashDescriptor(BaseModel):
    """A single image fingerprint."""
    model_config = ConfigDict(frozen=True)

    bits: str = Field(..., pattern=r"^[01]*$", description="Hash as a string of '0'/'1'")
    algorithm: AlgorithmId = Field(..., description="Algorithm that produced the hash")
    size: int = Field(..., ge=1, description="Sampling grid dimension")
    duration_micros: int = Field(..., ge=0, description="Time spent hashing")
    confidence: float = Field(..., ge=0, le=1, description="Per-algorithm reliability weight")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Free-form annotations")

    @property
    def bit_length(self) -> int:
        return len(self.bits)


class SimilarityResult(BaseModel):
    """Outcome of comparing two hashes."""
    model_config = ConfigDict(frozen=True)

    identical: bool
    similarity: float = Field(..., ge=0, le=1, description="1 - hamming / length")
    algorithm: str
    differing_bit_count: int = Field(0, ge=0)
    differing_bit_positions: Tuple[int, ...] = ()
    severity: Severity = Severity.LOW
    duration_micros: int = Field(0, ge=0)


class TierConfig(BaseModel):
    """One hashing tier (levels 1-3)."""
    model_config = ConfigDict(frozen=True)

    # Kept as given; every tier is resolved before a comparison hashes anything.
    algorithm: str = Field(..., description="Algorithm identifier")
    size: int = Field(..., ge=1, description="Sampling grid dimension")
    threshold: float = Field(..., ge=0, le=1, description="Similarity needed to stop escalating")


class SemanticTierConfig(BaseModel):
    """Level 4: hand-off to an external semantic analysis."""
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    semantic_threshold: float = Field(0.80, ge=0, le=1)
    endpoint: Optional[str] = Field(None, description="Where the caller sends the analysis request")


class MultiLevelConfig(BaseModel):
    """
    Ordered tier configuration.

    A level set to None is skipped. Use merged() to layer overrides on top
    of a base config; levels explicitly present in the overrides (including
    an explicit None) replace the base level wholesale.
    """
    model_config = ConfigDict(frozen=True)

    level1: Optional[TierConfig] = None
    level2: Optional[TierConfig] = None
    level3: Optional[TierConfig] = None
    level4: Optional[SemanticTierConfig] = None

    def merged(self, overrides: Union["MultiLevelConfig", Dict[str, Any], None] = None) -> "MultiLevelConfig":
        if overrides is None:
            return self
        if not isinstance(overrides, MultiLevelConfig):
            overrides = MultiLevelConfig.model_validate(overrides)

        updates = {name: getattr(overrides, name) for name in overrides.model_fields_set}
        return self.model_copy(update=updates)

    def tiers(self) -> List[Tuple[int, TierConfig]]:
        """Configured hashing tiers in escalation order."""
        levels = [(1, self.level1), (2, self.level2), (3, self.level3)]
        return [(level, tier) for level, tier in levels if tier is not None]

    @property
    def semantic_enabled(self) -> bool:
        return self.level4 is not None and self.level4.enabled


class EscalationOutcome(BaseModel):
    """Result of a progressive comparison."""
    model_config = ConfigDict(frozen=True)

    level_reached: int = Field(..., ge=1, le=4)
    result: SimilarityResult
    should_escalate_further: bool = Field(..., description="True when semantic analysis is needed")
    total_duration_micros: int = Field(..., ge=0)


class SemanticAnalysis(BaseModel):
    """What an external semantic analyzer hands back."""
    model_config = ConfigDict(frozen=True)

    description: str = Field(..., description="Human-readable summary of the visual change")
    confidence: float = Field(..., ge=0, le=1, description="Analyzer confidence that the images match")

    def is_match(self, threshold: float) -> bool:
        return self.confidence >= threshold
