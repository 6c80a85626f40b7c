"""Range types and taxon name handling.

A range is the representation of a taxon distribution. It can be either a
set of explicit sampling points (a presence-absence pixelation) or a
continuous density for the presence of the taxon at each pixel.
"""

from dataclasses import dataclass, field
from enum import Enum

# Smallest scaled density kept in a continuous range. Densities are written
# with six decimals, so smaller values would be read back as zero.
MIN_DENSITY = 0.0000005


class RangeType(str, Enum):
    """Type of a range map."""

    # A presence-absence pixelation, every occupied pixel has density 1.0
    POINTS = "points"

    # A continuous range map (a range map from literature, the output of a
    # distribution model, or a density estimation), scaled to a maximum of 1.0
    RANGE = "range"

    @classmethod
    def parse(cls, value: str) -> "RangeType":
        """Parse a type token as written in range files.

        An empty token is read as points.

        Raises:
            ValueError: If the token is not a known range type
        """
        token = value.strip().lower()
        if not token:
            return cls.POINTS
        return cls(token)


def canon(name: str) -> str:
    """Return a taxon name in its canonical form.

    Internal whitespace is collapsed, the name is lower-cased and only the
    first character is upper-cased, e.g. "  BRONTOSTOMA   discus " becomes
    "Brontostoma discus". Returns an empty string for blank names.
    """
    name = " ".join(name.split())
    if not name:
        return ""
    name = name.lower()
    first = name[0].upper()
    if len(first) != 1:
        # characters without a single upper-case form (e.g. "ß") are kept
        first = name[0]
    return first + name[1:]


@dataclass
class Taxon:
    """Range record of a taxon.

    Attributes:
        name: Canonical taxon name
        type: Type of the range map
        age: Age of the range map, in years (0 is the present)
        cells: Map of pixel ID to density, scaled so the maximum is 1.0
    """

    name: str
    type: RangeType
    age: int = 0
    cells: dict[int, float] = field(default_factory=dict)
