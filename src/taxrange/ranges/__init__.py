"""Taxon distribution ranges domain package.

This package contains the range collection data model and its TSV codec:
- Collection: Registry of taxon ranges over a single pixelation
- RangeType: Points (presence-absence) or continuous range maps
- read_tsv/write_tsv: Tab-delimited encoding of collections
"""

from taxrange.ranges.collection import Collection
from taxrange.ranges.errors import (
    PixelBoundsError,
    RangeConsistencyError,
    RangeError,
    RangeFormatError,
)
from taxrange.ranges.models import MIN_DENSITY, RangeType, canon
from taxrange.ranges.tsv import load, read_tsv, save, write_tsv

__all__ = [
    "MIN_DENSITY",
    "Collection",
    "PixelBoundsError",
    "RangeConsistencyError",
    "RangeError",
    "RangeFormatError",
    "RangeType",
    "canon",
    "load",
    "read_tsv",
    "save",
    "write_tsv",
]
