"""Configuration loading and saving.

The configuration is a YAML file (``taxrange.yaml``) located by the
PathResolver, unless an explicit path is given, e.g. with the ``--config``
option of the command line tools. A file with default values is written the
first time the configuration is loaded.
"""

import logging
import shutil
from pathlib import Path
from typing import Any

import yaml

from taxrange.config.models import TaxRangeConfig
from taxrange.system.path_resolver import PathResolver

logger = logging.getLogger(__name__)

HEADER = "# taxrange configuration\n"


def _version_key(version: str) -> tuple[int, ...]:
    try:
        return tuple(int(part) for part in version.split("."))
    except ValueError:
        return ()


class ConfigManager:
    """Reads and writes the taxrange configuration file."""

    CURRENT_VERSION = "1.0.0"

    def __init__(
        self, path_resolver: PathResolver | None = None, config_path: Path | None = None
    ):
        """Initialize ConfigManager.

        Args:
            path_resolver: Resolver of the default configuration path. If None,
                a new one is created from the environment.
            config_path: Explicit configuration file, taking precedence over
                the resolver.
        """
        self.path_resolver = path_resolver or PathResolver()
        self.config_path = Path(config_path or self.path_resolver.get_taxrange_config_path())

    def load(self) -> TaxRangeConfig:
        """Load and validate the configuration.

        Returns:
            TaxRangeConfig: Validated configuration

        Raises:
            OSError: If the configuration file cannot be read or created
            pydantic.ValidationError: If a configuration value is invalid
        """
        if not self.config_path.exists():
            defaults = TaxRangeConfig(config_version=self.CURRENT_VERSION)
            self._write_yaml(defaults.model_dump())
            logger.info("Created default configuration at %s", self.config_path)

        raw_config = self._read_yaml()
        return TaxRangeConfig(**self._known_fields(self._stamp_version(raw_config)))

    def save(self, config: TaxRangeConfig) -> None:
        """Save a configuration, keeping a backup of the previous file.

        Args:
            config: Configuration to save
        """
        if self.config_path.exists():
            backup_path = self.config_path.with_suffix(".yaml.backup")
            try:
                shutil.copy2(self.config_path, backup_path)
            except PermissionError:
                logger.warning("Could not create backup at %s", backup_path)

        self._write_yaml(config.model_dump())
        logger.info("Configuration saved to %s", self.config_path)

    def _read_yaml(self) -> dict[str, Any]:
        data = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
        return data or {}

    def _write_yaml(self, data: dict[str, Any]) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        body = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        self.config_path.write_text(HEADER + body, encoding="utf-8")

    def _stamp_version(self, raw_config: dict[str, Any]) -> dict[str, Any]:
        """Set the current version on files written by older releases."""
        version = str(raw_config.get("config_version", ""))
        if _version_key(version) > _version_key(self.CURRENT_VERSION):
            logger.warning(
                "Configuration version %s is newer than %s; unknown settings are ignored",
                version,
                self.CURRENT_VERSION,
            )
            return raw_config
        return {**raw_config, "config_version": self.CURRENT_VERSION}

    def _known_fields(self, raw_config: dict[str, Any]) -> dict[str, Any]:
        expected = set(TaxRangeConfig.model_fields)
        unexpected = set(raw_config) - expected
        if unexpected:
            logger.warning("Filtered out unexpected config fields: %s", sorted(unexpected))
        return {k: v for k, v in raw_config.items() if k in expected}
