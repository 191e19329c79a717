"""Progressive multi-level image comparison.

Tiers run cheapest first. The first tier whose similarity reaches its
threshold ends the comparison; if none does, the outcome either asks the
caller for a semantic analysis (level 4) or reports the images as
different.
"""

import asyncio
import logging
import time
from functools import lru_cache
from typing import Any, Dict, List, Optional, Protocol, Tuple, Union

from .config import default_config
from .encoder.phash import generate_hash
from .encoder.preprocess import PixelSource
from .models import (
    AlgorithmId,
    EscalationOutcome,
    HashDescriptor,
    MultiLevelConfig,
    SemanticAnalysis,
    SemanticTierConfig,
    Severity,
    SimilarityResult,
    TierConfig,
)
from .similarity import compare_hashes

logger = logging.getLogger(__name__)

ConfigOverrides = Union[MultiLevelConfig, Dict[str, Any], None]


class SemanticAnalyzer(Protocol):
    """Caller-supplied level 4 analysis, typically a remote API call."""

    def __call__(self, image_a: bytes, image_b: bytes, config: SemanticTierConfig) -> SemanticAnalysis:
        ...


def _elapsed_micros(start: int) -> int:
    return (time.perf_counter_ns() - start) // 1000


def _resolved_tiers(config: MultiLevelConfig) -> List[Tuple[int, TierConfig, AlgorithmId]]:
    """(level, tier, algorithm) for every configured tier; unknown names raise before any hashing."""
    return [(level, tier, AlgorithmId.resolve(tier.algorithm)) for level, tier in config.tiers()]


def _unresolved(algorithm: str, start: int) -> SimilarityResult:
    """Result reported when no hashing tier accepted the pair."""
    return SimilarityResult(
        identical=False,
        similarity=0.0,
        algorithm=algorithm,
        severity=Severity.HIGH,
        duration_micros=_elapsed_micros(start),
    )


class VisualHasher:
    """
    Runs the four-level comparison with a fixed base configuration.

    The configuration is built once (settings defaults, then the options
    given here) and is never modified; per-call options are layered on top
    for that call only.
    """

    def __init__(self, options: ConfigOverrides = None, pixel_source: Optional[PixelSource] = None):
        self.options = default_config().merged(options)
        self.pixel_source = pixel_source

    def generate_hash(self, image: bytes, algorithm: Union[AlgorithmId, str], size: int = 8) -> HashDescriptor:
        return generate_hash(image, algorithm, size, pixel_source=self.pixel_source)

    def compare_hashes(self, hash_a: HashDescriptor, hash_b: HashDescriptor) -> SimilarityResult:
        return compare_hashes(hash_a, hash_b)

    def _accepted(self, level: int, tier: TierConfig, result: SimilarityResult, start: int) -> Optional[EscalationOutcome]:
        if result.similarity >= tier.threshold:
            logger.info(
                f"Level {level} ({tier.algorithm}) accepted: similarity {result.similarity:.4f} "
                f">= {tier.threshold}"
            )
            return EscalationOutcome(
                level_reached=level,
                result=result,
                should_escalate_further=False,
                total_duration_micros=_elapsed_micros(start),
            )

        logger.debug(
            f"Level {level} ({tier.algorithm}) similarity {result.similarity:.4f} "
            f"below {tier.threshold}, escalating"
        )
        return None

    def _exhausted(self, config: MultiLevelConfig, start: int) -> EscalationOutcome:
        if config.semantic_enabled:
            logger.info("No hashing level matched, semantic analysis required")
            return EscalationOutcome(
                level_reached=4,
                result=_unresolved("semantic", start),
                should_escalate_further=True,
                total_duration_micros=_elapsed_micros(start),
            )

        tiers = config.tiers()
        highest = tiers[-1][0] if tiers else 3
        logger.info(f"No hashing level matched, stopping at level {highest}")
        return EscalationOutcome(
            level_reached=highest,
            result=_unresolved("progressive", start),
            should_escalate_further=False,
            total_duration_micros=_elapsed_micros(start),
        )

    def progressive_compare(self, image_a: bytes, image_b: bytes, options: ConfigOverrides = None) -> EscalationOutcome:
        """
        Compare two images, escalating through the configured levels.

        Args:
            image_a: First encoded image
            image_b: Second encoded image
            options: Per-call overrides layered over this hasher's config

        Returns:
            EscalationOutcome for the first level that accepted the pair,
            or the level 4 hand-off / final rejection

        Raises:
            UnknownAlgorithm: if any level names an unknown algorithm; raised
                before either image is decoded
            InvalidInput: if an image cannot be hashed
        """
        config = self.options.merged(options)
        start = time.perf_counter_ns()

        for level, tier, algorithm in _resolved_tiers(config):
            hash_a = self.generate_hash(image_a, algorithm, tier.size)
            hash_b = self.generate_hash(image_b, algorithm, tier.size)
            outcome = self._accepted(level, tier, compare_hashes(hash_a, hash_b), start)
            if outcome is not None:
                return outcome

        return self._exhausted(config, start)

    async def aprogressive_compare(
        self, image_a: bytes, image_b: bytes, options: ConfigOverrides = None
    ) -> EscalationOutcome:
        """Same as progressive_compare, hashing both images of a level concurrently."""
        config = self.options.merged(options)
        start = time.perf_counter_ns()

        for level, tier, algorithm in _resolved_tiers(config):
            hash_a, hash_b = await asyncio.gather(
                asyncio.to_thread(self.generate_hash, image_a, algorithm, tier.size),
                asyncio.to_thread(self.generate_hash, image_b, algorithm, tier.size),
            )
            outcome = self._accepted(level, tier, compare_hashes(hash_a, hash_b), start)
            if outcome is not None:
                return outcome

        return self._exhausted(config, start)

    def resolve_semantic(
        self,
        image_a: bytes,
        image_b: bytes,
        outcome: EscalationOutcome,
        analyzer: SemanticAnalyzer,
        options: ConfigOverrides = None,
    ) -> Optional[SemanticAnalysis]:
        """
        Hand a level 4 outcome to the caller's semantic analyzer.

        Returns None when the outcome does not ask for escalation.
        """
        if not outcome.should_escalate_further:
            return None

        config = self.options.merged(options)
        semantic_config = config.level4 or SemanticTierConfig()
        analysis = analyzer(image_a, image_b, semantic_config)

        logger.info(
            f"Semantic analysis: confidence {analysis.confidence:.2f} "
            f"(threshold {semantic_config.semantic_threshold}): {analysis.description}"
        )
        return analysis


@lru_cache(maxsize=1)
def default_hasher() -> VisualHasher:
    return VisualHasher()


def progressive_compare(image_a: bytes, image_b: bytes, options: ConfigOverrides = None) -> EscalationOutcome:
    return default_hasher().progressive_compare(image_a, image_b, options)


async def aprogressive_compare(image_a: bytes, image_b: bytes, options: ConfigOverrides = None) -> EscalationOutcome:
    return await default_hasher().aprogressive_compare(image_a, image_b, options)
