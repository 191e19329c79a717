"""Tests for environment-driven defaults."""

from visualhash.config import HasherSettings, default_config
from visualhash.progressive import VisualHasher


def test_defaults_without_environment():
    config = default_config()
    assert [(level, tier.algorithm, tier.size) for level, tier in config.tiers()] == [
        (1, "difference", 8),
        (2, "advanced-perceptual", 16),
        (3, "structural", 32),
    ]
    assert config.semantic_enabled is True
    assert config.level4.endpoint is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("VISUALHASH_LEVEL1_ALGORITHM", "average")
    monkeypatch.setenv("VISUALHASH_LEVEL1_THRESHOLD", "0.5")
    monkeypatch.setenv("VISUALHASH_LEVEL4_ENABLED", "false")
    monkeypatch.setenv("VISUALHASH_LEVEL4_ENDPOINT", "http://localhost:8080/semantic")

    config = HasherSettings().to_config()
    assert config.level1.algorithm == "average"
    assert config.level1.threshold == 0.5
    assert config.semantic_enabled is False
    assert config.level4.endpoint == "http://localhost:8080/semantic"


def test_hasher_reads_environment_once(monkeypatch):
    monkeypatch.setenv("VISUALHASH_LEVEL2_SIZE", "32")
    hasher = VisualHasher()
    monkeypatch.setenv("VISUALHASH_LEVEL2_SIZE", "8")
    assert hasher.options.level2.size == 32
