"""Isolatitude pixelation of the sphere.

The sphere is cut into rings of equal latitude spacing, from the north pole
(ring 0) to the south pole. Each ring holds a number of pixels proportional
to its circumference, so pixels have roughly the same area. Pixel IDs are
assigned ring by ring from the north pole, and inside a ring from west to
east starting at the antimeridian (longitude -180).

The grid is defined by the number of pixels on the equatorial ring. With 360
pixels at the equator a pixel is about one degree wide and the whole sphere
is covered by 41 258 pixels.
"""

import math
from bisect import bisect_right
from typing import NamedTuple

# Smallest equator size that yields at least three rings
MIN_EQUATOR = 4


def _round(value: float) -> int:
    """Round half away from zero (values are never negative here)."""
    return int(math.floor(value + 0.5))


class Pixel(NamedTuple):
    """A pixel of the pixelation, located by the coordinates of its center."""

    id: int
    ring: int
    lat: float
    lon: float


class Pixelation:
    """An isolatitude pixelation with a given number of pixels at the equator."""

    def __init__(self, equator: int) -> None:
        """Build the ring layout of the pixelation.

        Args:
            equator: Number of pixels on the equatorial ring

        Raises:
            ValueError: If the equator is too small to define a grid
        """
        if equator < MIN_EQUATOR:
            raise ValueError(f"invalid equator size {equator}: must be at least {MIN_EQUATOR}")

        rings = equator // 2
        if rings % 2 == 0:
            # there must be an equatorial ring
            rings += 1

        self._equator = equator
        self._ring_step = 180.0 / (rings - 1)
        self._ring_start: list[int] = []
        self._ring_len: list[int] = []

        total = 0
        for ring in range(rings):
            colatitude = ring * self._ring_step
            pixels = _round(equator * math.sin(colatitude * math.pi / 180))
            if pixels < 1:
                pixels = 1
            self._ring_start.append(total)
            self._ring_len.append(pixels)
            total += pixels
        self._len = total

    @property
    def equator(self) -> int:
        """Number of pixels on the equatorial ring."""
        return self._equator

    @property
    def rings(self) -> int:
        """Number of rings, poles included."""
        return len(self._ring_len)

    @property
    def ring_step(self) -> float:
        """Separation between rings, in degrees."""
        return self._ring_step

    def __len__(self) -> int:
        return self._len

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pixelation):
            return NotImplemented
        return self._equator == other._equator

    def __hash__(self) -> int:
        return hash(("pixelation", self._equator))

    def __repr__(self) -> str:
        return f"Pixelation(equator={self._equator})"

    def ring_pixels(self, ring: int) -> int:
        """Return the number of pixels in a ring."""
        return self._ring_len[ring]

    def pixel(self, lat: float, lon: float) -> Pixel:
        """Return the pixel that contains a geographic point.

        Args:
            lat: Latitude in degrees, in [-90, 90]
            lon: Longitude in degrees, in [-180, 180]

        Returns:
            The pixel that contains the point

        Raises:
            ValueError: If the coordinates are out of range
        """
        if not -90 <= lat <= 90:
            raise ValueError(f"invalid latitude {lat:.6f}")
        if not -180 <= lon <= 180:
            raise ValueError(f"invalid longitude {lon:.6f}")

        ring = _round((90 - lat) / self._ring_step)
        pixels = self._ring_len[ring]
        pos = _round((lon + 180) / 360 * pixels)
        if pos >= pixels:
            # the antimeridian is the first pixel of the ring
            pos = 0
        return self._make_pixel(ring, pos)

    def id(self, pixel_id: int) -> Pixel:
        """Return the pixel with a given ID.

        Raises:
            ValueError: If the ID is not part of the pixelation
        """
        if not 0 <= pixel_id < self._len:
            raise ValueError(f"invalid pixel ID {pixel_id}: pixelation has {self._len} pixels")
        ring = bisect_right(self._ring_start, pixel_id) - 1
        return self._make_pixel(ring, pixel_id - self._ring_start[ring])

    def _make_pixel(self, ring: int, pos: int) -> Pixel:
        lat = 90 - ring * self._ring_step
        lon = pos * 360 / self._ring_len[ring] - 180
        return Pixel(id=self._ring_start[ring] + pos, ring=ring, lat=lat, lon=lon)
