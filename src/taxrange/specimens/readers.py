"""Readers for specimen records.

Specimen records are geo-referenced occurrences of a taxon. The readers
in this module add each record as a presence point of a range collection.

Supported formats:
- text: tab-delimited file with "species", "latitude" and "longitude" columns
- darwin: tab-delimited DarwinCore file (as downloaded from GBIF) with
  "species", "decimalLatitude" and "decimalLongitude" columns
- csv: DarwinCore file using commas as delimiters
- pbdb: tab-delimited file downloaded from the PaleoBiology Database, with
  "accepted_name", "lat" and "lng" columns after a metadata preamble
"""

import csv
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from os import PathLike
from typing import IO

from taxrange.ranges import Collection, RangeType, canon

logger = logging.getLogger(__name__)

# Ages are given in million years, and stored in years
MILLION_YEARS = 1_000_000

# Line that closes the metadata preamble of PaleoBiology Database downloads
PBDB_RECORDS_MARK = "Records:"


class SpecimenFormat(str, Enum):
    """Formats of specimen record files."""

    TEXT = "text"
    DARWIN = "darwin"
    CSV = "csv"
    PBDB = "pbdb"


class SpecimenFormatError(ValueError):
    """Raised when a specimen file cannot be imported."""

    def __init__(
        self, source: str, message: str, row: int | None = None, field: str | None = None
    ) -> None:
        self.source = source
        self.row = row
        self.field = field
        location = f"on file {source!r}"
        if row is not None:
            location += f": row {row}"
        if field is not None:
            location += f": field {field!r}"
        super().__init__(f"{location}: {message}")


@dataclass(frozen=True)
class _Layout:
    """Column names and dialect of a specimen file format."""

    name: str
    latitude: str
    longitude: str
    delimiter: str = "\t"
    quoting: int = csv.QUOTE_NONE
    comments: bool = False
    preamble: bool = False


_LAYOUTS = {
    SpecimenFormat.TEXT: _Layout("species", "latitude", "longitude", comments=True),
    SpecimenFormat.DARWIN: _Layout("species", "decimallatitude", "decimallongitude"),
    SpecimenFormat.CSV: _Layout(
        "species", "decimallatitude", "decimallongitude", delimiter=",", quoting=csv.QUOTE_MINIMAL
    ),
    SpecimenFormat.PBDB: _Layout("accepted_name", "lat", "lng", preamble=True),
}


class _Lines:
    """Iterator over the lines of a stream that keeps the current line number."""

    def __init__(self, stream: IO[str], comment: str | None = None) -> None:
        self._lines = iter(stream)
        self._comment = comment
        self.number = 0

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        while True:
            text = next(self._lines)
            self.number += 1
            if self._comment and text.startswith(self._comment):
                continue
            return text


def read_specimens(
    stream: IO[str],
    collection: Collection,
    fmt: SpecimenFormat | str = SpecimenFormat.TEXT,
    age: float = 0.0,
    source: str = "stdin",
) -> int:
    """Add the specimen records of a stream to a collection.

    Args:
        stream: Text stream with the specimen records
        collection: Collection that receives the points
        fmt: Format of the specimen file
        age: Age of the records, in million years
        source: Name of the stream, used in error messages

    Returns:
        Number of records added to the collection

    Raises:
        ValueError: If the format is unknown
        SpecimenFormatError: If the file cannot be read, or a record is added
            to a taxon with a continuous range map
    """
    if not isinstance(fmt, SpecimenFormat):
        fmt = SpecimenFormat(fmt.lower())
    layout = _LAYOUTS[fmt]
    lines = _Lines(stream, comment="#" if layout.comments else None)

    if layout.preamble:
        for text in lines:
            if text.startswith(PBDB_RECORDS_MARK):
                break
        else:
            raise SpecimenFormatError(source, f"missing {PBDB_RECORDS_MARK!r} line")

    reader = csv.reader(lines, delimiter=layout.delimiter, quoting=layout.quoting)
    header = next(reader, None)
    if header is None:
        raise SpecimenFormatError(source, "while reading header: empty file")
    columns = {name.strip().lower(): i for i, name in enumerate(header)}
    fields = (layout.name, layout.latitude, layout.longitude)
    for name in fields:
        if name not in columns:
            raise SpecimenFormatError(source, f"expecting field {name!r}")
    width = max(columns[name] for name in fields) + 1

    years = int(age * MILLION_YEARS)
    added = 0
    for row in reader:
        line = lines.number
        if not any(cell.strip() for cell in row):
            continue
        if len(row) < width:
            raise SpecimenFormatError(source, f"expecting {width} fields, got {len(row)}", row=line)

        taxon = row[columns[layout.name]]
        lat = _coordinate(
            row[columns[layout.latitude]], "latitude", 90, source, line, layout.latitude
        )
        lon = _coordinate(
            row[columns[layout.longitude]], "longitude", 180, source, line, layout.longitude
        )
        if not canon(taxon):
            continue

        tp = collection.type(taxon)
        if tp is not None and tp != RangeType.POINTS:
            raise SpecimenFormatError(
                source, f"taxon {canon(taxon)!r}: has defined a {tp.value!r} map", row=line
            )
        if collection.add(taxon, years, lat, lon):
            added += 1

    logger.debug("Imported %d specimen records from %s", added, source)
    return added


def read_specimens_file(
    path: str | PathLike,
    collection: Collection,
    fmt: SpecimenFormat | str = SpecimenFormat.TEXT,
    age: float = 0.0,
) -> int:
    """Add the specimen records of a file to a collection.

    See read_specimens for details.
    """
    with open(path, newline="", encoding="utf-8") as f:
        return read_specimens(f, collection, fmt=fmt, age=age, source=str(path))


def _coordinate(value: str, kind: str, limit: float, source: str, line: int, field: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise SpecimenFormatError(
            source, f"invalid number {value!r}", row=line, field=field
        ) from None
    if not -limit <= number <= limit:
        raise SpecimenFormatError(source, f"invalid {kind} {number:.6f}", row=line, field=field)
    return number
