"""
Undefsym -- Undefined ELF Symbol Finder
========================================

Scans ELF object files and shared libraries for symbols that are
referenced but never defined, the condition that makes the dynamic loader
fail at runtime.

Capabilities:
    - Bounds-checked parsing of ELF32 and ELF64 little-endian objects
    - Memory-mapped file loading with optional write-back
    - Halt-on-first-error or keep-going batch policies
    - Plain-text and JSON reports

References:
    - TIS Committee. (1995). ELF Specification, Version 1.2.
"""

__version__ = "1.0.0"
__all__ = [
    "UndefsymEngine",
    "ElfSymbolScanner",
    "Finding",
    "BatchResult",
]

from undefsym.core.engine import UndefsymEngine
from undefsym.core.models import BatchResult, Finding
from undefsym.parsers.elf_parser import ElfSymbolScanner
