"""System integration helpers."""

from taxrange.system.path_resolver import PathResolver

__all__ = ["PathResolver"]
