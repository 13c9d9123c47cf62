"""
Undefsym Console Output
========================

Terminal rendering for scan results.

Finding lines go to stdout exactly as ``<path> contains undefined
symbols: <name>`` so that the output can be grepped or diffed.  Fatal
errors, warnings and the optional summary table go to stderr through
:class:`~shared.console.ToolConsole`.
"""

from __future__ import annotations

import click

from shared.console import ToolConsole

from undefsym.core.models import BatchResult, FileScanResult


class UndefsymConsoleOutput:
    """Prints per-file results as they arrive and a closing summary."""

    def __init__(self, console: ToolConsole | None = None) -> None:
        self._console = console or ToolConsole()

    def file_result(self, result: FileScanResult) -> None:
        """Emit the finding lines or the diagnostic for one file."""
        for finding in result.findings:
            click.echo(finding.line)
        if result.failed:
            self._console.error(result.error_message or f"{result.path}: scan failed")

    def summary(self, batch: BatchResult) -> None:
        """Render a status table for the batch on stderr."""
        rows = [
            (
                r.path,
                r.status.value,
                f"ELF{r.elf_bits}" if r.elf_bits else "-",
                len(r.findings),
                r.skip_reason or r.error_kind or "",
            )
            for r in batch.files
        ]
        self._console.table(
            "Scan Summary",
            ["File", "Status", "Class", "Undefined", "Detail"],
            rows,
            caption=f"{len(batch.findings)} undefined symbol(s)",
            styles=["", "", "", "bold", "dim"],
        )
        if batch.halted:
            self._console.warning(
                "stopped at the first fatal error; use --keep-going to "
                "scan the remaining files"
            )
