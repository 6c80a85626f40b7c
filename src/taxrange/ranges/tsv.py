"""TSV encoding of range collections.

A range file is a tab-delimited file with the following columns:

- taxon: the name of the taxon
- type: the type of the range map, either "points" (a presence-absence
  pixelation) or "range" (a continuous range map). Empty is read as points.
- age: the age of the range map, in years
- equator: the number of pixels at the equator of the pixelation
- pixel: the ID of a pixel of the pixelation
- density: the density for the presence of the taxon at that pixel

Columns can be in any order and header names are case insensitive. Lines
starting with "#" are comments. Here is an example file::

    # taxon distribution range models
    taxon	type	age	equator	pixel	density
    Brontostoma discus	points	0	360	17319	1.000000
    Brontostoma discus	points	0	360	19117	1.000000
    Eoraptor lunensis	range	230000000	360	34661	0.200000
    Eoraptor lunensis	range	230000000	360	34662	0.500000
    Eoraptor lunensis	range	230000000	360	34663	1.000000
    Eoraptor lunensis	range	230000000	360	34664	0.500000
    Eoraptor lunensis	range	230000000	360	34665	0.200000
"""

import csv
import io
import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from os import PathLike
from typing import IO

from taxrange.earth import Pixelation
from taxrange.ranges.collection import Collection
from taxrange.ranges.errors import PixelBoundsError, RangeConsistencyError, RangeFormatError
from taxrange.ranges.models import MIN_DENSITY, RangeType, Taxon, canon

logger = logging.getLogger(__name__)

HEADER_FIELDS = ["taxon", "type", "age", "equator", "pixel", "density"]
COMMENT = "#"


def read_tsv(stream: IO, pixelation: Pixelation | None = None) -> Collection:
    """Read a collection of range maps from a TSV stream.

    Args:
        stream: Text or binary stream with the range file
        pixelation: Pixelation of the collection. If None, the pixelation is
            defined by the equator of the first data row.

    Returns:
        The collection, with continuous ranges scaled to a maximum of 1.0

    Raises:
        RangeFormatError: If the header or a field cannot be parsed
        RangeConsistencyError: If a row disagrees with previous rows
        PixelBoundsError: If a pixel is not part of the pixelation
    """
    with _as_text(stream) as text:
        rows = _rows(text)
        header = next(rows, None)
        if header is None:
            raise RangeFormatError("while reading header: empty stream")
        columns = {name.strip().lower(): i for i, name in enumerate(header[1])}
        for name in HEADER_FIELDS:
            if name not in columns:
                raise RangeFormatError(f"expecting field {name!r}")
        width = max(columns[name] for name in HEADER_FIELDS) + 1

        pix = pixelation
        records: dict[str, Taxon] = {}
        data_rows = 0
        for line, row in rows:
            data_rows += 1
            if len(row) < width:
                raise RangeFormatError(f"expecting {width} fields, got {len(row)}", row=line)

            field = "equator"
            equator = _parse_int(row[columns[field]], line, field)
            if pix is None:
                try:
                    pix = Pixelation(equator)
                except ValueError as e:
                    raise RangeFormatError(str(e), row=line, field=field) from e
            if pix.equator != equator:
                raise RangeConsistencyError(line, field, equator, pix.equator)

            field = "type"
            try:
                tp = RangeType.parse(row[columns[field]])
            except ValueError:
                raise RangeFormatError(
                    f"invalid type {row[columns[field]]!r}", row=line, field=field
                ) from None

            field = "age"
            age = _parse_int(row[columns[field]], line, field)

            name = canon(row[columns["taxon"]])
            if not name:
                continue
            tax = records.get(name)
            if tax is None:
                tax = Taxon(name=name, type=tp, age=age)
                records[name] = tax
            if tax.type != tp:
                raise RangeConsistencyError(line, "type", tp.value, tax.type.value, what="type")
            if tax.age != age:
                raise RangeConsistencyError(line, "age", age, tax.age, what="age")

            field = "pixel"
            pixel = _parse_int(row[columns[field]], line, field)
            if pixel < 0 or pixel >= len(pix):
                raise PixelBoundsError(pixel, len(pix), row=line)

            density = 1.0
            if tax.type == RangeType.RANGE:
                field = "density"
                density = _parse_float(row[columns[field]], line, field)
                if density < 0:
                    raise RangeFormatError(f"invalid density {density}", row=line, field=field)
                if density == 0:
                    continue
            tax.cells[pixel] = density

    if pix is None or not data_rows:
        raise RangeFormatError("while reading data: no data rows")

    for tax in records.values():
        if tax.type != RangeType.RANGE:
            continue
        if not tax.cells:
            raise RangeFormatError(f"taxon {tax.name!r}: range without positive densities")
        # a repeated pixel keeps the density of its last row
        scale = max(tax.cells.values())
        tax.cells = {
            px: density / scale
            for px, density in tax.cells.items()
            if density / scale >= MIN_DENSITY
        }

    logger.debug(
        "Read range collection: %d taxa from %d rows (equator %d)",
        len(records),
        data_rows,
        pix.equator,
    )
    return Collection._from_records(pix, records)


def write_tsv(collection: Collection, stream: IO, now: datetime | None = None) -> None:
    """Write a collection of range maps as a TSV stream.

    Taxa are written in name order, and pixels of each taxon in ID order.

    Args:
        collection: Collection to write
        stream: Text or binary stream
        now: Time stamp written in the file comments (defaults to current UTC time)
    """
    now = now or datetime.now(UTC)
    equator = str(collection.pixelation().equator)

    with _as_text(stream) as text:
        text.write("# taxon distribution range models\n")
        text.write(f"# data saved on: {now.isoformat(timespec='seconds')}\n")
        tab = csv.writer(text, dialect=csv.excel_tab)
        tab.writerow(HEADER_FIELDS)

        for name in collection.taxa():
            tp = collection.type(name)
            age = str(collection.age(name))
            rng = collection.range(name)
            for pixel in sorted(rng):
                tab.writerow([name, tp.value, age, equator, str(pixel), f"{rng[pixel]:.6f}"])


def load(path: str | PathLike, pixelation: Pixelation | None = None) -> Collection:
    """Read a collection of range maps from a TSV file."""
    with open(path, newline="", encoding="utf-8") as f:
        return read_tsv(f, pixelation)


def save(collection: Collection, path: str | PathLike) -> None:
    """Write a collection of range maps into a TSV file."""
    with open(path, "w", newline="", encoding="utf-8") as f:
        write_tsv(collection, f)


def _rows(stream: IO[str]) -> Iterator[tuple[int, list[str]]]:
    """Yield the line number and fields of each non-comment line."""
    for line, text in enumerate(stream, start=1):
        if text.startswith(COMMENT) or not text.strip("\r\n"):
            continue
        yield line, next(csv.reader([text], dialect=csv.excel_tab))


def _parse_int(value: str, line: int, field: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise RangeFormatError(f"invalid integer {value!r}", row=line, field=field) from None


def _parse_float(value: str, line: int, field: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise RangeFormatError(f"invalid number {value!r}", row=line, field=field) from None
    if not math.isfinite(number):
        raise RangeFormatError(f"invalid number {value!r}", row=line, field=field)
    return number


@contextmanager
def _as_text(stream: IO) -> Iterator[IO[str]]:
    """Wrap binary streams as UTF-8 text, leaving them open afterwards."""
    if not isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        yield stream
        return

    text = io.TextIOWrapper(stream, encoding="utf-8", newline="")
    try:
        yield text
    finally:
        text.flush()
        text.detach()
