r"""Command line tools for taxon distribution ranges.

Usage:
    taxrange taxa [--count] [RANGE-FILE...]
    taxrange imp-points [--equator N] [--age MA] [--format FORMAT] \
        [--output RANGE-FILE] [SPECIMEN-FILE...]
"""

import sys
from pathlib import Path
from typing import NoReturn

import click
from pydantic import ValidationError

from taxrange import ranges
from taxrange.config import ConfigManager, TaxRangeConfig
from taxrange.ranges import Collection
from taxrange.specimens import SpecimenFormat, read_specimens, read_specimens_file
from taxrange.utils.structlog_configurator import configure_structlog, get_logger

logger = get_logger(__name__)

STDIN = "-"


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the configuration file",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """Taxon distribution range tools.

    Range files are tab-delimited files with the pixelated distribution range
    of one or more taxa.

    Examples:
      # List the taxa of a range file, with the number of pixels
      taxrange taxa --count ranges.tab

      # Import GBIF records into a range file
      taxrange imp-points --format darwin --output ranges.tab gbif-download.csv
    """
    ctx.ensure_object(dict)
    try:
        config = ConfigManager(config_path=config_path).load()
    except (OSError, ValidationError) as e:
        _fail(f"Error loading configuration: {e}")
    configure_structlog(config)
    ctx.obj["config"] = config


@cli.command()
@click.option("--count", is_flag=True, help="Also print the range type and number of pixels")
@click.argument("files", nargs=-1, type=click.Path(dir_okay=False, allow_dash=True))
def taxa(files: tuple[str, ...], count: bool) -> None:
    """Print the list of taxa with distribution ranges.

    One or more range files can be given. If no file is given, the ranges are
    read from the standard input.
    """
    for i, name in enumerate(files or (STDIN,)):
        if i > 0:
            click.echo()
        label = "stdin" if name == STDIN else name
        coll = _read_collection(name)

        click.echo(f"{label}:")
        for tax in coll.taxa():
            line = f"\t{tax}"
            if count:
                line += f"\t{coll.type(tax).value}\t{len(coll.range(tax))}"
            click.echo(line)


@cli.command("imp-points")
@click.option(
    "-e", "--equator", type=int, help="Pixels at the equator (default taken from configuration)"
)
@click.option("--age", type=float, default=0.0, show_default=True, help="Age in million years")
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice([f.value for f in SpecimenFormat], case_sensitive=False),
    help="Format of the specimen files (default taken from configuration)",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Range file; points are added to it if it exists",
)
@click.argument("files", nargs=-1, type=click.Path(dir_okay=False, allow_dash=True))
@click.pass_context
def imp_points(
    ctx: click.Context,
    equator: int | None,
    age: float,
    fmt: str | None,
    output: Path | None,
    files: tuple[str, ...],
) -> None:
    """Import specimen records into a range file.

    Each record is added as a presence point of its taxon, at the given age.
    No rotation is made, so coordinates are taken as paleo-coordinates at that
    age. If no file is given, records are read from the standard input.
    """
    config: TaxRangeConfig = ctx.obj["config"]
    fmt = fmt or config.default_format

    coll = _output_collection(output, equator or config.default_equator)
    if equator is not None and coll.pixelation().equator != equator:
        _fail(f"invalid --equator value {equator}: want {coll.pixelation().equator}")

    added = 0
    for name in files or (STDIN,):
        try:
            if name == STDIN:
                added += read_specimens(sys.stdin, coll, fmt=fmt, age=age)
            else:
                added += read_specimens_file(name, coll, fmt=fmt, age=age)
        except (OSError, ValueError) as e:
            _fail(str(e))

    logger.info("Specimen records imported", records=added, taxa=len(coll))
    try:
        if output is None:
            ranges.write_tsv(coll, sys.stdout)
            sys.stdout.flush()
        else:
            ranges.save(coll, output)
    except OSError as e:
        _fail(f"while writing ranges: {e}")


def _read_collection(name: str) -> Collection:
    label = "stdin" if name == STDIN else name
    try:
        if name == STDIN:
            return ranges.read_tsv(sys.stdin)
        return ranges.load(name)
    except (OSError, ValueError) as e:
        _fail(f"when reading {label!r}: {e}")


def _output_collection(output: Path | None, equator: int) -> Collection:
    if output is None or not output.exists():
        try:
            return Collection.with_equator(equator)
        except ValueError as e:
            _fail(str(e))
    try:
        return ranges.load(output)
    except (OSError, ValueError) as e:
        _fail(f"when reading {str(output)!r}: {e}")


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"✗ {message}", fg="red"), err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
