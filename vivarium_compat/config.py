"""
Library configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Classification thresholds
    qualifying_score_threshold: float = Field(
        default=70.0,
        description="Minimum percentage score for a vivarium type to qualify"
    )
    fallback_score_threshold: float = Field(
        default=50.0,
        description="Minimum percentage score for Deserterium/Aerarium in the fallback path"
    )

    # Normalization parameters
    air_circulation_widening: float = Field(
        default=10.0,
        description="Points added on each side of an air circulation bucket range"
    )
    default_max_size_cm: float = Field(
        default=30.0,
        description="Maximum plant size assumed when the size string cannot be parsed"
    )

    # Enclosure sizing parameters
    enclosure_usable_height_ratio: float = Field(
        default=0.70,
        description="Share of enclosure height left above the substrate layer"
    )
    enclosure_padding_ratio: float = Field(
        default=0.20,
        description="Headroom above the plant as a share of its juvenile size"
    )
    enclosure_min_padding_cm: float = Field(
        default=2.0,
        description="Minimum headroom above the plant in centimeters"
    )

    # Caching
    normalized_cache_size: int = Field(
        default=4096,
        description="Maximum number of normalized plants memoized by the classification service"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # Library metadata
    app_name: str = Field(
        default="Vivarium Compatibility Engine",
        description="Library name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Library version"
    )

    class Config:
        env_file = ".env"
        env_prefix = "VIVARIUM_"
        case_sensitive = False


# Global settings instance
settings = Settings()
