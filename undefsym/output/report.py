"""
Undefsym Report Generator
==========================

Builds a structured JSON report of a batch run, suitable for CI checks
and downstream tooling.  The report lists every file with its status,
the undefined symbols it references, and totals for the whole run.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from undefsym import __version__
from undefsym.core.models import BatchResult, FileScanResult, FileStatus


class UndefsymReportGenerator:
    """Serialises :class:`BatchResult` objects.

    Usage::

        generator = UndefsymReportGenerator()
        text = generator.to_json(batch)
        generator.generate_json(batch, "undefsym-report.json")
    """

    def build(self, batch: BatchResult) -> dict[str, Any]:
        """Return the report as a JSON-compatible dictionary."""
        return {
            "report_type": "undefsym_scan",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "summary": {
                "files": len(batch.files),
                "scanned": sum(1 for r in batch.files if r.status is FileStatus.SCANNED),
                "skipped": len(batch.skipped),
                "failed": len(batch.failed),
                "undefined_symbols": len(batch.findings),
                "halted": batch.halted,
                "exit_code": batch.exit_code,
                "duration_seconds": batch.duration_seconds,
            },
            "files": [self._file_entry(r) for r in batch.files],
        }

    def to_json(self, batch: BatchResult) -> str:
        return json.dumps(self.build(batch), indent=2, ensure_ascii=False, default=str)

    def generate_json(self, batch: BatchResult, output_path: str) -> str:
        """Write the JSON report to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json(batch))
            f.write("\n")

        return str(path.resolve())

    @staticmethod
    def _file_entry(result: FileScanResult) -> dict[str, Any]:
        entry = result.model_dump(
            mode="json",
            exclude={"findings"},
            exclude_none=True,
        )
        entry["undefined_symbols"] = [f.symbol for f in result.findings]
        return entry
