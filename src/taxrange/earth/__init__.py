"""Earth pixelation domain.

This package provides the isolatitude pixelation used to discretize
geographic points into integer pixel IDs.
"""

from taxrange.earth.pixelation import MIN_EQUATOR, Pixel, Pixelation

__all__ = ["MIN_EQUATOR", "Pixel", "Pixelation"]
