"""
Undefsym Scan Engine
=====================

Drives the per-file pipeline over a batch of paths:

    1. Map the file (:class:`~undefsym.loader.mapped_file.FileLoader`)
    2. Scan the mapping (:class:`~undefsym.parsers.elf_parser.ElfSymbolScanner`)
    3. Release the mapping, flushing it first when write-back is enabled
    4. Record the outcome as a :class:`FileScanResult`

Files are processed strictly one after another.  A fatal error on one
file either stops the batch (the default) or, with ``keep_going``, is
recorded and the next file is processed.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator

from shared.config import ToolConfig
from shared.logger import ToolLogger

from undefsym.core.errors import UndefsymError
from undefsym.core.models import BatchResult, FileScanResult, FileStatus
from undefsym.loader.mapped_file import FileLoader
from undefsym.parsers.elf_layout import MIN_HEADER_SIZE
from undefsym.parsers.elf_parser import ElfSymbolScanner


class UndefsymEngine:
    """Runs the undefined-symbol scan over one or more files.

    Usage::

        engine = UndefsymEngine()
        batch = engine.run(["a.o", "libb.so"])
        for finding in batch.findings:
            print(finding.line)

    Args:
        config: Tool configuration.  Defaults are used if not provided.
        logger: Logger instance.  A new one is created if not provided.
    """

    def __init__(
        self,
        config: ToolConfig | None = None,
        logger: ToolLogger | None = None,
    ) -> None:
        self._config: ToolConfig = config or ToolConfig()
        self._logger: ToolLogger = logger or ToolLogger("engine")
        self._loader = FileLoader(
            write_back=self._config.scan.write_back,
            logger=self._logger,
        )

    @property
    def config(self) -> ToolConfig:
        return self._config

    # ------------------------------------------------------------------ #
    #  Batch entry points
    # ------------------------------------------------------------------ #

    def iter_scan(self, paths: Iterable[str]) -> Iterator[FileScanResult]:
        """Scan *paths* in order, yielding each result as it completes.

        Stops after the first failed file unless ``scan.keep_going`` is
        set; the failed result is still yielded.
        """
        keep_going = self._config.scan.keep_going
        paths = list(paths)
        for index, path in enumerate(paths):
            result = self.scan_file(path)
            yield result
            if result.failed and not keep_going:
                remaining = len(paths) - index - 1
                if remaining:
                    self._logger.warning(
                        "stopping after failure in %s; %d file(s) not scanned",
                        path,
                        remaining,
                    )
                return

    def run(
        self,
        paths: Iterable[str],
        on_result: Callable[[FileScanResult], None] | None = None,
    ) -> BatchResult:
        """Scan *paths* and collect everything into a :class:`BatchResult`.

        Args:
            paths: Files to scan, in order.
            on_result: Called with each :class:`FileScanResult` as soon as
                it is available, before the next file is opened.
        """
        paths = list(paths)
        batch = BatchResult()
        with self._logger.timed(f"scan of {len(paths)} file(s)"):
            for result in self.iter_scan(paths):
                batch.add(result)
                if on_result is not None:
                    on_result(result)
        batch.halted = bool(batch.failed) and len(batch.files) < len(paths)
        return batch.finalize()

    # ------------------------------------------------------------------ #
    #  Single file
    # ------------------------------------------------------------------ #

    def scan_file(self, path: str) -> FileScanResult:
        """Scan one file, converting fatal errors into a failed result.

        Only :class:`UndefsymError` is caught; anything else is a bug and
        propagates.
        """
        with self._logger.operation(path):
            try:
                return self._scan_file(path)
            except UndefsymError as exc:
                self._logger.info("scan failed: %s", exc, error_kind=exc.kind)
                return FileScanResult(
                    path=path,
                    status=FileStatus.FAILED,
                    error_kind=exc.kind,
                    error_message=str(exc),
                )

    def _scan_file(self, path: str) -> FileScanResult:
        with self._loader.open(path) as obj:
            if obj is None:
                reason = f"smaller than the minimum ELF header ({MIN_HEADER_SIZE} bytes)"
                self._logger.debug("skipping %s: %s", path, reason)
                return FileScanResult(
                    path=path, status=FileStatus.SKIPPED, skip_reason=reason
                )

            scanner = ElfSymbolScanner(
                obj.view,
                path,
                include_dynsym=self._config.scan.include_dynsym,
            )
            outcome = scanner.scan()

        if outcome.skipped:
            self._logger.debug("skipping %s: %s", path, outcome.skip_reason)
            return FileScanResult(
                path=path,
                status=FileStatus.SKIPPED,
                size=obj.size,
                skip_reason=outcome.skip_reason,
            )

        self._logger.debug(
            "%s: ELF%d, %d symbol table(s), %d symbols, %d undefined",
            path,
            outcome.elf_class.bits if outcome.elf_class else 0,
            outcome.symbol_tables,
            outcome.symbols_scanned,
            len(outcome.findings),
        )
        return FileScanResult(
            path=path,
            status=FileStatus.SCANNED,
            elf_bits=outcome.elf_class.bits if outcome.elf_class else None,
            size=obj.size,
            findings=outcome.findings,
            symbol_tables=outcome.symbol_tables,
            symbols_scanned=outcome.symbols_scanned,
        )
