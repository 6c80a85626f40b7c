"""Taxrange configuration package.

This package provides configuration management with:
- Validation of settings through Pydantic models
- Defaults for missing configuration files
- YAML parsing and serialization
"""

from .manager import ConfigManager
from .models import LoggingConfig, TaxRangeConfig

__all__ = [
    "ConfigManager",
    "LoggingConfig",
    "TaxRangeConfig",
]
