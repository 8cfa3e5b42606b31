"""CLI entry point for treesum.

Provides commands for writing a checksum report, checking files
against a report, and listing the available digest algorithms.
"""

import asyncio
import io
import sys
from collections.abc import AsyncIterator, Sequence
from pathlib import Path

import click

from treesum import __version__
from treesum.config.models import Config
from treesum.models.results import Result


def _validate_sources(sources: Sequence[Path], recursive: bool) -> None:
    """Fail fast on sources that cannot be checksummed as requested."""
    for src in sources:
        try:
            is_dir = src.is_dir()
            src.stat()
        except FileNotFoundError as e:
            raise click.ClickException(f"{src}: File not found ({e})") from e
        except OSError as e:
            raise click.ClickException(f"{src}: Something went wrong ({e})") from e
        if is_dir and not recursive:
            raise click.ClickException(
                f"{src}: Must include --recursive to checksum files inside a folder"
            )


def _split_get_args(args: Sequence[str], default_algorithm: str) -> tuple[str, list[Path]]:
    """Separate an optional leading HASH from the sources."""
    if len(args) > 1 and not Path(args[0]).exists():
        return args[0], [Path(arg) for arg in args[1:]]
    return default_algorithm, [Path(arg) for arg in args]


async def _collect(stream: AsyncIterator[Result]) -> list[Result]:
    return [result async for result in stream]


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option("--verbose", "-v", count=True, help="Log more (repeat for debug output)")
@click.pass_context
def cli(ctx: click.Context, config: Path | None, verbose: int) -> None:
    """Get the checksum of a file, files, or directory.

    Hashes many files concurrently and reports every file that
    could not be hashed without stopping the rest of the run.
    """
    from treesum.config.loader import load_config
    from treesum.errors import ConfigurationError
    from treesum.utils.logging import configure_logging

    try:
        cfg = load_config(config)
    except (ValueError, ConfigurationError) as e:
        raise click.ClickException(str(e)) from e

    configure_logging(cfg.logging, verbosity=verbose)
    ctx.obj = cfg


@cli.command()
@click.option(
    "--recursive",
    "-r",
    is_flag=True,
    help="Get the checksum of folders and files recursively",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="The output file of the checksum(s)",
)
@click.argument("args", metavar="[HASH] SRC...", nargs=-1, required=True)
@click.pass_obj
def get(cfg: Config, recursive: bool, output: Path | None, args: tuple[str, ...]) -> None:
    """Get the checksum of a file or files.

    Writes an INI-style report with one path=digest line per file,
    and one path=description line per error. When HASH is omitted the
    configured default algorithm is used; the first of several
    arguments is taken as HASH unless it exists on disk.
    """
    from treesum.digest.registry import AlgorithmTable
    from treesum.report import ChecksumReport
    from treesum.services.engine import ChecksumEngine

    hash_name, sources = _split_get_args(args, cfg.digest.default_algorithm)
    _validate_sources(sources, recursive)

    table = AlgorithmTable.from_hashlib(cfg.digest.algorithms)
    algorithm = hash_name.lower()
    if algorithm not in table:
        raise click.ClickException(f"The hash provided is not supported: {hash_name}")

    engine = ChecksumEngine(table, cfg.engine, cfg.walk)
    results = asyncio.run(_collect(engine.checksum_many(list(sources), algorithm)))

    report = ChecksumReport(algorithm=algorithm)
    for result in results:
        report.add(result)

    for path, description in sorted(report.errors.items()):
        click.echo(f"{path}: {description}", err=True)

    if output is None:
        buffer = io.StringIO()
        report.render(buffer)
        click.echo(buffer.getvalue(), nl=False)
    else:
        with output.open("w", encoding="utf-8") as f:
            report.render(f)

    if report.errors:
        click.echo("Could not get the checksum of all the files", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--recursive",
    "-r",
    is_flag=True,
    help="Compare the checksum of folders and files recursively",
)
@click.argument(
    "checksum_file",
    metavar="CHECKSUMFILE",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument("sources", metavar="[SRC...]", nargs=-1, type=click.Path(path_type=Path))
@click.pass_obj
def check(cfg: Config, recursive: bool, checksum_file: Path, sources: tuple[Path, ...]) -> None:
    """Check local files against a checksum file.

    Without SRC, every file recorded in CHECKSUMFILE is re-hashed.
    Exits non-zero when any file changed, appeared, went missing,
    or could not be hashed.
    """
    from treesum.digest.registry import AlgorithmTable
    from treesum.errors import ReportFormatError
    from treesum.report import ChecksumReport
    from treesum.services.engine import ChecksumEngine

    try:
        report = ChecksumReport.load(checksum_file)
    except ReportFormatError as e:
        raise click.ClickException(f"{checksum_file}: {e}") from e

    if sources:
        _validate_sources(sources, recursive)
        roots = list(sources)
        expected = report.paths_under(roots)
    else:
        roots = [Path(path) for path in sorted(report.files)]
        expected = None

    table = AlgorithmTable.from_hashlib(cfg.digest.algorithms)
    if report.algorithm.lower() not in table:
        raise click.ClickException(f"The hash in the checksum file is not supported: {report.algorithm}")

    click.echo(f"Checking {len(roots)} source(s) against {checksum_file} [hash: {report.algorithm}]")

    engine = ChecksumEngine(table, cfg.engine, cfg.walk)
    results = asyncio.run(_collect(engine.checksum_many(roots, report.algorithm.lower())))
    diff = report.compare(results, expected=expected)

    for path in diff.changed:
        click.echo(f"CHANGED {path}")
    for path in diff.added:
        click.echo(f"ADDED {path}")
    for path in diff.missing:
        click.echo(f"MISSING {path}")
    for error in diff.failed:
        click.echo(f"FAILED {error}")

    if not diff.clean:
        sys.exit(1)
    click.echo("OK")


@cli.command(name="list")
@click.pass_obj
def list_algorithms(cfg: Config) -> None:
    """List all the hashes available to use."""
    from treesum.digest.registry import AlgorithmTable

    table = AlgorithmTable.from_hashlib(cfg.digest.algorithms)
    for name in table.names():
        click.echo(f"* {name}")


if __name__ == "__main__":
    cli()
