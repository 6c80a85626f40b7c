"""Error types raised by range collections and the TSV codec."""


class RangeError(ValueError):
    """Base class for invalid range data."""


class RangeFormatError(RangeError):
    """Raised when range data cannot be parsed.

    Attributes:
        row: Line number of the offending row (None for stream level problems)
        field: Name of the offending column, if any
    """

    def __init__(self, message: str, row: int | None = None, field: str | None = None) -> None:
        self.row = row
        self.field = field
        super().__init__(_locate(message, row, field))


class RangeConsistencyError(RangeError):
    """Raised when a row disagrees with values already set for the collection.

    Attributes:
        row: Line number of the offending row
        field: Name of the offending column
        got: Value found in the row
        want: Value already stored
    """

    def __init__(self, row: int, field: str, got: object, want: object, what: str = "") -> None:
        self.row = row
        self.field = field
        self.got = got
        self.want = want
        label = f"invalid {what}: " if what else ""
        super().__init__(_locate(f"{label}got {got!r}, want {want!r}", row, field))


class PixelBoundsError(RangeError):
    """Raised when a pixel ID is outside the collection pixelation.

    Attributes:
        pixel: The offending pixel ID
        size: Number of pixels in the pixelation
        row: Line number of the offending row, when reading a file
    """

    def __init__(self, pixel: int, size: int, row: int | None = None) -> None:
        self.pixel = pixel
        self.size = size
        self.row = row
        field = "pixel" if row is not None else None
        message = f"invalid pixel value {pixel} (pixelation size {size})"
        super().__init__(_locate(message, row, field))


def _locate(message: str, row: int | None, field: str | None) -> str:
    if field is not None:
        message = f"field {field!r}: {message}"
    if row is not None:
        message = f"on row {row}: {message}"
    return message
