"""
Undefsym Data Models
=====================

Pydantic models for the values the scanner produces: individual
:class:`Finding` records, the per-file :class:`FileScanResult`, and the
:class:`BatchResult` that aggregates a whole command-line run.
"""

from __future__ import annotations

import datetime as _dt
import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class FileStatus(str, enum.Enum):
    """Outcome of processing one input path."""
    SCANNED = "scanned"
    SKIPPED = "skipped"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------

class Finding(BaseModel):
    """An undefined symbol referenced by an object file.

    Attributes:
        path: File the symbol was found in.
        symbol: Symbol name as stored in the string table.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    symbol: str

    @property
    def line(self) -> str:
        """The one-line text form printed for each finding."""
        return f"{self.path} contains undefined symbols: {self.symbol}"


# ---------------------------------------------------------------------------
# Per-file and batch results
# ---------------------------------------------------------------------------

class FileScanResult(BaseModel):
    """Everything recorded about one input path.

    Attributes:
        path: Input path as given.
        status: Scanned, skipped (not ELF) or failed (fatal error).
        elf_bits: 32 or 64 for scanned files, ``None`` otherwise.
        size: File size in bytes, when known.
        findings: Undefined symbols in discovery order.
        symbol_tables: Symbol table sections walked.
        symbols_scanned: Symbol records decoded.
        skip_reason: Why a skipped file is not applicable.
        error_kind: Exception class name for failed files.
        error_message: Human-readable diagnostic for failed files.
    """

    model_config = ConfigDict(use_enum_values=False)

    path: str
    status: FileStatus = FileStatus.SCANNED
    elf_bits: Optional[int] = None
    size: Optional[int] = None
    findings: list[Finding] = Field(default_factory=list)
    symbol_tables: int = 0
    symbols_scanned: int = 0
    skip_reason: Optional[str] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status is FileStatus.FAILED


class BatchResult(BaseModel):
    """Aggregated result of a run over several paths.

    Findings stay in file-then-discovery order; nothing is sorted or
    deduplicated.
    """

    files: list[FileScanResult] = Field(default_factory=list)
    halted: bool = Field(
        default=False,
        description="True when processing stopped at a fatal error",
    )
    start_time: _dt.datetime = Field(
        default_factory=lambda: _dt.datetime.now(_dt.timezone.utc)
    )
    end_time: Optional[_dt.datetime] = None

    @property
    def findings(self) -> list[Finding]:
        return [f for result in self.files for f in result.findings]

    @property
    def failed(self) -> list[FileScanResult]:
        return [r for r in self.files if r.failed]

    @property
    def skipped(self) -> list[FileScanResult]:
        return [r for r in self.files if r.status is FileStatus.SKIPPED]

    @property
    def exit_code(self) -> int:
        """Process exit status: 1 if any file failed, else 0."""
        return 1 if self.failed else 0

    @property
    def duration_seconds(self) -> float | None:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    def add(self, result: FileScanResult) -> None:
        self.files.append(result)

    def finalize(self) -> BatchResult:
        """Stamp *end_time* and return ``self``."""
        self.end_time = _dt.datetime.now(_dt.timezone.utc)
        return self
