import os
from pathlib import Path


class PathResolver:
    """Resolves the per-user files of the taxrange tools.

    The data directory is taken from TAXRANGE_DATA, then from the XDG base
    directory ($XDG_DATA_HOME/taxrange), then ~/.local/share/taxrange.
    """

    def __init__(self) -> None:
        """Initialize PathResolver from the environment."""
        data_dir = os.getenv("TAXRANGE_DATA")
        if not data_dir:
            xdg_data = os.getenv("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
            data_dir = str(Path(xdg_data) / "taxrange")
        self.data_dir = Path(data_dir)

    def get_taxrange_config_path(self) -> Path:
        """Get the path to the configuration file.

        TAXRANGE_CONFIG takes precedence over the file in the data directory.
        """
        config_path = os.getenv("TAXRANGE_CONFIG")
        if config_path:
            return Path(config_path)
        return self.data_dir / "config" / "taxrange.yaml"

    def get_data_dir(self) -> Path:
        """Get the data directory path."""
        return self.data_dir
