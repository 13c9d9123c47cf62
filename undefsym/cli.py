"""
Undefsym CLI
=============

Click-based command-line interface.

Usage::

    # Report undefined symbols in every file given
    undefsym lib/*.so bin/*

    # Keep scanning after a corrupt file, still exiting non-zero
    undefsym --keep-going lib/*.so

    # Machine-readable output
    undefsym --json build/*.o > report.json

    # Debug logging to a rotating JSON-lines file
    undefsym -v --log-file undefsym.log libfoo.so

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys

import click

from shared.config import ToolConfig
from shared.console import ToolConsole
from shared.logger import ToolLogger

from undefsym import __version__
from undefsym.core.engine import UndefsymEngine
from undefsym.core.models import FileScanResult
from undefsym.output.console import UndefsymConsoleOutput
from undefsym.output.report import UndefsymReportGenerator


_VERSION_MESSAGE = (
    "%(prog)s %(version)s\n"
    "%(prog)s comes with ABSOLUTELY NO WARRANTY.\n"
    "You may redistribute copies of %(prog)s\n"
    "under the terms of the GNU General Public License.\n"
    "For more information about these matters, see the file named COPYING."
)


def _load_config(console: ToolConsole, config_path: str | None) -> ToolConfig:
    try:
        return ToolConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"cannot load configuration: {exc}")
        sys.exit(2)


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

@click.command("undefsym", context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("files", nargs=-1, type=click.Path(), metavar="[FILE]...")
@click.version_option(
    __version__, "--version", prog_name="undefsym", message=_VERSION_MESSAGE
)
@click.option(
    "--keep-going", "-k",
    is_flag=True,
    default=False,
    help="Continue with the remaining files after a fatal error.",
)
@click.option(
    "--dynsym",
    "include_dynsym",
    is_flag=True,
    default=False,
    help="Also scan the dynamic symbol table (SHT_DYNSYM).",
)
@click.option(
    "--write-back",
    is_flag=True,
    default=False,
    help="Open files read/write and flush each mapping after scanning.",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print a JSON report to stdout instead of finding lines.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write the JSON report to this file.",
)
@click.option(
    "--summary", "-s",
    is_flag=True,
    default=False,
    help="Print a per-file summary table to stderr.",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="TOML configuration file (default: ./undefsym.toml if present).",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write log records to this rotating file.",
)
@click.pass_context
def undefsym_cli(
    ctx: click.Context,
    files: tuple[str, ...],
    keep_going: bool,
    include_dynsym: bool,
    write_back: bool,
    json_output: bool,
    output_path: str | None,
    summary: bool,
    config_path: str | None,
    verbose: bool,
    log_file: str | None,
) -> None:
    """Processes ELF files and checks for undefined symbols that would
    otherwise cause runtime errors.

    Each undefined symbol is printed as

    \b
        FILE contains undefined symbols: NAME

    Files that are not ELF objects are skipped silently.  The exit status
    is 1 if any file could not be scanned.
    """
    if not files:
        click.echo(ctx.get_help())
        return

    console = ToolConsole()
    config = _load_config(console, config_path)

    # Flags can only switch behaviour on; the config file sets the baseline.
    scan = config.scan
    scan.keep_going = keep_going or scan.keep_going
    scan.include_dynsym = include_dynsym or scan.include_dynsym
    scan.write_back = write_back or scan.write_back

    settings = config.global_settings
    logger = ToolLogger(
        "engine",
        log_level="DEBUG" if verbose or settings.debug else settings.log_level,
        log_file=log_file or settings.log_file,
        json_logs=settings.log_json,
    )

    engine = UndefsymEngine(config=config, logger=logger)
    display = UndefsymConsoleOutput(console=console)

    def on_result(result: FileScanResult) -> None:
        if json_output:
            if result.failed:
                console.error(result.error_message or result.path)
        else:
            display.file_result(result)

    try:
        batch = engine.run(files, on_result=on_result)
    except KeyboardInterrupt:
        console.warning("Scan interrupted by user.")
        sys.exit(130)

    report_gen = UndefsymReportGenerator()
    if json_output:
        click.echo(report_gen.to_json(batch))
    if output_path:
        report_path = report_gen.generate_json(batch, output_path)
        logger.info("JSON report saved: %s", report_path)
    if summary:
        display.summary(batch)

    sys.exit(batch.exit_code)


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for the ``undefsym`` console script."""
    undefsym_cli()


if __name__ == "__main__":
    main()
