"""Collections of taxon distribution ranges.

A collection maps canonical taxon names to range records over a single
isolatitude pixelation. All names are canonicalized on every call, so
"Eoraptor lunensis" and "  EORAPTOR   Lunensis" refer to the same taxon.
"""

import logging
import math
from collections.abc import Iterator, Mapping

from taxrange.earth import Pixelation
from taxrange.ranges.errors import PixelBoundsError, RangeError
from taxrange.ranges.models import MIN_DENSITY, RangeType, Taxon, canon

logger = logging.getLogger(__name__)


class Collection:
    """A collection of distribution ranges with an associated pixelation."""

    def __init__(self, pixelation: Pixelation) -> None:
        """Create an empty collection.

        Args:
            pixelation: Pixelation used by every range in the collection
        """
        self._pix = pixelation
        self._taxa: dict[str, Taxon] = {}

    @classmethod
    def with_equator(cls, equator: int) -> "Collection":
        """Create an empty collection on a pixelation with the given equator size."""
        return cls(Pixelation(equator))

    @classmethod
    def _from_records(cls, pixelation: Pixelation, records: Mapping[str, Taxon]) -> "Collection":
        coll = cls(pixelation)
        coll._taxa = dict(records)
        return coll

    def pixelation(self) -> Pixelation:
        """Return the underlying pixelation of the collection."""
        return self._pix

    def add(self, name: str, age: int, lat: float, lon: float) -> bool:
        """Add a presence point to a taxon.

        If the taxon is not in the collection it is created as a points
        range. Points can only be added to points ranges: if the taxon has a
        continuous range, the point is not added.

        Args:
            name: Taxon name
            age: Age of the point, in years (only used when the taxon is created)
            lat: Latitude of the point, in degrees
            lon: Longitude of the point, in degrees

        Returns:
            True if the point was added, False if it was rejected

        Raises:
            ValueError: If the coordinates are out of range
        """
        pixel = self._pix.pixel(lat, lon)
        return self._add_point(name, age, pixel.id)

    def add_pixel(self, name: str, age: int, pixel: int) -> bool:
        """Add a presence pixel to a taxon.

        Same as add, but using a pixel ID instead of a geographic point.

        Returns:
            True if the pixel was added, False if it was rejected

        Raises:
            PixelBoundsError: If the pixel is not part of the pixelation
        """
        self._check_pixel(pixel)
        return self._add_point(name, age, pixel)

    def set(self, name: str, age: int, field: Mapping[int, float]) -> None:
        """Set a continuous range map for a taxon.

        Any range previously set for the taxon is replaced. The values are
        scaled so the maximum value is 1.0, and scaled values smaller than
        MIN_DENSITY (including values of 0 or less) are not stored. If no
        pixel is left the taxon is removed.

        Args:
            name: Taxon name
            age: Age of the range map, in years
            field: Map of pixel IDs to densities

        Raises:
            PixelBoundsError: If a pixel is not part of the pixelation
            RangeError: If a value is not a finite number
        """
        name = canon(name)
        if not name:
            return

        for pixel, value in field.items():
            self._check_pixel(pixel)
            if not math.isfinite(value):
                raise RangeError(f"invalid density {value!r} for pixel {pixel}")

        scale = max(field.values(), default=0)
        if scale <= 0:
            self._taxa.pop(name, None)
            return

        cells = {px: v / scale for px, v in field.items() if v / scale >= MIN_DENSITY}
        self._taxa[name] = Taxon(name=name, type=RangeType.RANGE, age=age, cells=cells)

    def set_pixels(self, name: str, age: int, field: Mapping[int, float]) -> None:
        """Set a taxon range as a presence-absence pixelation.

        Any range previously set for the taxon is replaced. Every pixel in
        the field is set as present (with density 1.0), whatever its value.
        An empty field removes the taxon.

        Raises:
            PixelBoundsError: If a pixel is not part of the pixelation
        """
        name = canon(name)
        if not name:
            return

        for pixel in field:
            self._check_pixel(pixel)

        if not field:
            self._taxa.pop(name, None)
            return

        cells = dict.fromkeys(field, 1.0)
        self._taxa[name] = Taxon(name=name, type=RangeType.POINTS, age=age, cells=cells)

    def range(self, name: str) -> dict[int, float]:
        """Return the range map of a taxon.

        The range map is a map of pixel IDs to densities scaled so the
        maximum value is 1.0 (for points, every pixel is 1.0). The returned
        map is a copy. Unknown taxa return an empty map.
        """
        tax = self._taxa.get(canon(name))
        if tax is None:
            return {}
        return dict(tax.cells)

    def type(self, name: str) -> RangeType | None:
        """Return the range type of a taxon, or None for unknown taxa."""
        tax = self._taxa.get(canon(name))
        if tax is None:
            return None
        return tax.type

    def age(self, name: str) -> int:
        """Return the age (in years) of the range of a taxon, 0 for unknown taxa."""
        tax = self._taxa.get(canon(name))
        if tax is None:
            return 0
        return tax.age

    def has_taxon(self, name: str) -> bool:
        """Return True if the taxon is in the collection."""
        name = canon(name)
        if not name:
            return False
        return name in self._taxa

    def delete(self, name: str) -> None:
        """Remove a taxon from the collection."""
        self._taxa.pop(canon(name), None)

    def taxa(self) -> list[str]:
        """Return the sorted list of taxon names in the collection."""
        return sorted(self._taxa)

    def __len__(self) -> int:
        return len(self._taxa)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_taxon(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.taxa())

    def __repr__(self) -> str:
        return f"Collection(equator={self._pix.equator}, taxa={len(self._taxa)})"

    def _add_point(self, name: str, age: int, pixel: int) -> bool:
        name = canon(name)
        if not name:
            return False

        tax = self._taxa.get(name)
        if tax is None:
            tax = Taxon(name=name, type=RangeType.POINTS, age=age)
            self._taxa[name] = tax
        if tax.type != RangeType.POINTS:
            logger.debug("Point rejected: taxon %r has a %s map", name, tax.type.value)
            return False

        tax.cells[pixel] = 1.0
        return True

    def _check_pixel(self, pixel: int) -> None:
        if not 0 <= pixel < len(self._pix):
            raise PixelBoundsError(pixel, len(self._pix))
