"""Configuration models for taxrange.

This module contains the configuration-related Pydantic models used by the
command line tools.
"""

from pydantic import BaseModel, Field, field_validator

from taxrange.earth import MIN_EQUATOR
from taxrange.specimens import SpecimenFormat


class LoggingConfig(BaseModel):
    """Structlog-based logging configuration."""

    level: str = "INFO"
    json_logs: bool | None = None  # None = auto-detect based on environment
    include_caller: bool = False  # Include file:line info (useful for debugging)
    extra_fields: dict[str, str] = Field(default_factory=lambda: {"service": "taxrange"})


class TaxRangeConfig(BaseModel):
    """Configuration settings for the taxrange tools."""

    # Version tracking
    config_version: str = "1.0.0"

    # Pixelation used for new range files
    default_equator: int = 360

    # Format of specimen files when none is given
    default_format: str = SpecimenFormat.TEXT.value

    # Logging settings
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("default_equator")
    @classmethod
    def validate_default_equator(cls, v: int) -> int:
        """Validate that the equator defines a usable pixelation."""
        if v < MIN_EQUATOR:
            raise ValueError(f"Invalid equator size {v}. Must be at least {MIN_EQUATOR}.")
        return v

    @field_validator("default_format")
    @classmethod
    def validate_default_format(cls, v: str) -> str:
        """Validate the specimen file format name."""
        valid = [f.value for f in SpecimenFormat]
        if v.lower() not in valid:
            raise ValueError(
                f"Invalid specimen format '{v}'. Must be one of: {', '.join(valid)}."
            )
        return v.lower()
