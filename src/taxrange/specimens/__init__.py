"""Specimen records domain package.

Readers that import geo-referenced specimen records as presence points of a
range collection.
"""

from taxrange.specimens.readers import (
    MILLION_YEARS,
    SpecimenFormat,
    SpecimenFormatError,
    read_specimens,
    read_specimens_file,
)

__all__ = [
    "MILLION_YEARS",
    "SpecimenFormat",
    "SpecimenFormatError",
    "read_specimens",
    "read_specimens_file",
]
