"""Default tier configuration, overridable through VISUALHASH_* environment variables."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import MultiLevelConfig, SemanticTierConfig, TierConfig


class HasherSettings(BaseSettings):
    """Defaults for the four escalation levels."""

    model_config = SettingsConfigDict(
        env_prefix="VISUALHASH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Level 1: millisecond-level check
    level1_algorithm: str = "difference"
    level1_size: int = 8
    level1_threshold: float = 0.95

    # Level 2: perceptual hashing
    level2_algorithm: str = "advanced-perceptual"
    level2_size: int = 16
    level2_threshold: float = 0.90

    # Level 3: detailed structure
    level3_algorithm: str = "structural"
    level3_size: int = 32
    level3_threshold: float = 0.85

    # Level 4: semantic hand-off
    level4_enabled: bool = True
    level4_semantic_threshold: float = 0.80
    level4_endpoint: Optional[str] = None

    def to_config(self) -> MultiLevelConfig:
        return MultiLevelConfig(
            level1=TierConfig(
                algorithm=self.level1_algorithm,
                size=self.level1_size,
                threshold=self.level1_threshold,
            ),
            level2=TierConfig(
                algorithm=self.level2_algorithm,
                size=self.level2_size,
                threshold=self.level2_threshold,
            ),
            level3=TierConfig(
                algorithm=self.level3_algorithm,
                size=self.level3_size,
                threshold=self.level3_threshold,
            ),
            level4=SemanticTierConfig(
                enabled=self.level4_enabled,
                semantic_threshold=self.level4_semantic_threshold,
                endpoint=self.level4_endpoint,
            ),
        )


def default_config() -> MultiLevelConfig:
    """Build the default config from the current environment."""
    return HasherSettings().to_config()
