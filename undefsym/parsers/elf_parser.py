"""
ELF Undefined Symbol Scanner
==============================

Struct-based scanner for the Executable and Linkable Format (ELF) that
reports symbols an object references but never defines.

All parsing goes through :class:`~undefsym.parsers.buffer.ByteView`, so
every header, section header, symbol record and string the scanner
touches is range-checked against the buffer length first.  Both ELF32
and ELF64 little-endian objects are supported; the width is selected once
from the class byte and every later step runs against the chosen
:class:`~undefsym.parsers.elf_layout.ElfLayout`.

A symbol is reported when it is:
    - of type ``STT_NOTYPE``,
    - bound ``STB_GLOBAL`` (weak references may stay unresolved, and the
      reserved entry 0 of each table is ``STB_LOCAL``), and
    - placed in section ``SHN_UNDEF``.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
    - Linux man page: elf(5).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from undefsym.core.errors import (
    InvalidClass,
    InvalidEntrySize,
    TruncatedHeader,
    TruncatedSectionTable,
    TruncatedStringTable,
    TruncatedSymbolTable,
    UnsupportedEndianness,
)
from undefsym.core.models import Finding
from undefsym.parsers.buffer import ByteView
from undefsym.parsers.elf_layout import (
    EI_CLASS,
    EI_DATA,
    EI_NIDENT,
    ELF_MAGIC,
    ELFDATA2LSB,
    LAYOUTS,
    MIN_HEADER_SIZE,
    ElfClass,
    ElfLayout,
)


# ---------------------------------------------------------------------------
# ELF Constants
# ---------------------------------------------------------------------------

# Section header types
SHT_SYMTAB: int = 2
SHT_DYNSYM: int = 11

# Symbol binding
STB_GLOBAL: int = 1

# Symbol types
STT_NOTYPE: int = 0

# Special section indices
SHN_UNDEF: int = 0


# ---------------------------------------------------------------------------
# Parsed structures
# ---------------------------------------------------------------------------

class _ELFHeader:
    """The file header fields the scanner needs."""
    __slots__ = ("e_shoff", "e_shentsize", "e_shnum")

    def __init__(self, fields: dict[str, int]) -> None:
        self.e_shoff: int = fields["e_shoff"]
        self.e_shentsize: int = fields["e_shentsize"]
        self.e_shnum: int = fields["e_shnum"]


class _SectionHeader:
    """Parsed section header entry."""
    __slots__ = (
        "index", "sh_type", "sh_offset", "sh_size",
        "sh_link", "sh_entsize",
    )

    def __init__(self, index: int, fields: dict[str, int]) -> None:
        self.index = index
        self.sh_type: int = fields["sh_type"]
        self.sh_offset: int = fields["sh_offset"]
        self.sh_size: int = fields["sh_size"]
        self.sh_link: int = fields["sh_link"]
        self.sh_entsize: int = fields["sh_entsize"]


class SymbolEntry:
    """One decoded symbol table record."""
    __slots__ = ("st_name", "st_info", "st_shndx")

    def __init__(self, st_name: int, st_info: int, st_shndx: int) -> None:
        self.st_name = st_name
        self.st_info = st_info
        self.st_shndx = st_shndx

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> SymbolEntry:
        return cls(fields["st_name"], fields["st_info"], fields["st_shndx"])

    @property
    def binding(self) -> int:
        return (self.st_info >> 4) & 0xF

    @property
    def type(self) -> int:
        return self.st_info & 0xF

    @property
    def is_reportable(self) -> bool:
        """Referenced here, expected from elsewhere, and not weak."""
        return (
            self.type == STT_NOTYPE
            and self.binding == STB_GLOBAL
            and self.st_shndx == SHN_UNDEF
        )


@dataclass(slots=True)
class ScanOutcome:
    """Result of scanning one buffer.

    Attributes:
        skip_reason: Why the buffer is not an ELF object, or ``None``.
        elf_class: Detected class; ``None`` when skipped.
        findings: Reportable symbols in discovery order.
        symbol_tables: Number of symbol table sections walked.
        symbols_scanned: Number of symbol records decoded.
    """
    skip_reason: Optional[str] = None
    elf_class: Optional[ElfClass] = None
    findings: list[Finding] = field(default_factory=list)
    symbol_tables: int = 0
    symbols_scanned: int = 0

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

class ElfSymbolScanner:
    """Bounds-checked ELF symbol table scanner.

    Usage::

        scanner = ElfSymbolScanner(raw_bytes, "libfoo.so")
        outcome = scanner.scan()
        for finding in outcome.findings:
            print(finding.line)

    Args:
        data: Complete file contents (``bytes`` or an ``mmap``).
        path: Path reported in findings and error messages.
        include_dynsym: Also walk ``SHT_DYNSYM`` sections.

    Raises (from :meth:`scan`):
        ElfFormatError: Unsupported class or byte order.
        ElfStructureError: A structure does not fit inside the buffer.
    """

    def __init__(
        self,
        data: Any,
        path: str,
        *,
        include_dynsym: bool = False,
    ) -> None:
        self._view = data if isinstance(data, ByteView) else ByteView(data, path)
        self._path = path
        self._symtab_types: frozenset[int] = (
            frozenset({SHT_SYMTAB, SHT_DYNSYM})
            if include_dynsym
            else frozenset({SHT_SYMTAB})
        )

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def scan(self) -> ScanOutcome:
        """Validate the buffer and collect every reportable symbol.

        Returns:
            A :class:`ScanOutcome`; ``outcome.skipped`` is set for buffers
            that are not ELF objects at all.
        """
        reason = self._identify()
        if reason is not None:
            return ScanOutcome(skip_reason=reason)

        layout = self._select_layout()
        header = self._parse_elf_header(layout)
        sections = self._parse_section_headers(layout, header)

        outcome = ScanOutcome(elf_class=layout.elf_class)
        # Index 0 is the reserved null section.
        for sh in sections[1:]:
            if sh.sh_type not in self._symtab_types:
                continue
            outcome.symbol_tables += 1
            for sym in self._iter_symbols(layout, sh):
                outcome.symbols_scanned += 1
                if sym.is_reportable:
                    name = self._symbol_name(sh, sections, sym)
                    outcome.findings.append(Finding(path=self._path, symbol=name))
        return outcome

    # ------------------------------------------------------------------ #
    #  Identification
    # ------------------------------------------------------------------ #

    def _identify(self) -> Optional[str]:
        """Return a skip reason for non-ELF buffers, ``None`` otherwise."""
        size = self._view.size
        if size < MIN_HEADER_SIZE:
            return (
                f"file is {size} bytes, smaller than the minimum "
                f"ELF header ({MIN_HEADER_SIZE} bytes)"
            )
        if self._view.read_bytes(0, len(ELF_MAGIC)) != ELF_MAGIC:
            return "no ELF magic"
        return None

    def _select_layout(self) -> ElfLayout:
        """Dispatch on the class byte; reject big-endian objects."""
        ei_class = self._view.read_u8(EI_CLASS)
        if ei_class not in (ElfClass.ELF32, ElfClass.ELF64):
            raise InvalidClass(self._path, ei_class)
        ei_data = self._view.read_u8(EI_DATA)
        if ei_data != ELFDATA2LSB:
            raise UnsupportedEndianness(self._path, ei_data)
        return LAYOUTS[ElfClass(ei_class)]

    # ------------------------------------------------------------------ #
    #  ELF header and section header table
    # ------------------------------------------------------------------ #

    def _parse_elf_header(self, layout: ElfLayout) -> _ELFHeader:
        self._view.require(
            0,
            layout.header_size,
            what=f"ELF{layout.elf_class.bits} header",
            error=TruncatedHeader,
        )
        fields = self._view.unpack(layout.ehdr, EI_NIDENT)
        return _ELFHeader(layout.decode_header(fields))

    def _parse_section_headers(
        self, layout: ElfLayout, header: _ELFHeader
    ) -> list[_SectionHeader]:
        """Read the whole section header table after checking its extent."""
        shoff = header.e_shoff
        if shoff == 0:
            return []
        if header.e_shentsize != layout.shdr_size:
            raise InvalidEntrySize(
                self._path,
                "section header table (e_shentsize)",
                header.e_shentsize,
                layout.shdr_size,
            )

        count = header.e_shnum
        if count == 0:
            # Extended numbering: the real count lives in section 0's sh_size.
            self._view.require(
                shoff, layout.shdr_size,
                what="section header 0",
                error=TruncatedSectionTable,
            )
            count = self._read_section(layout, shoff, 0).sh_size
            if count == 0:
                return []

        self._view.require(
            shoff, count * layout.shdr_size, error=TruncatedSectionTable
        )
        return [
            self._read_section(layout, shoff + i * layout.shdr_size, i)
            for i in range(count)
        ]

    def _read_section(self, layout: ElfLayout, offset: int, index: int) -> _SectionHeader:
        return _SectionHeader(
            index, layout.decode_section(self._view.unpack(layout.shdr, offset))
        )

    # ------------------------------------------------------------------ #
    #  Symbol tables
    # ------------------------------------------------------------------ #

    def _iter_symbols(
        self, layout: ElfLayout, sh: _SectionHeader
    ) -> Iterator[SymbolEntry]:
        what = f"symbol table in section {sh.index}"
        self._view.require(
            sh.sh_offset, sh.sh_size, what=what, error=TruncatedSymbolTable
        )
        if sh.sh_entsize < layout.sym_size:
            raise InvalidEntrySize(self._path, what, sh.sh_entsize, layout.sym_size)

        count = sh.sh_size // sh.sh_entsize
        for i in range(count):
            record = self._view.unpack(layout.sym, sh.sh_offset + i * sh.sh_entsize)
            yield SymbolEntry.from_fields(layout.decode_symbol(record))

    def _symbol_name(
        self,
        sh: _SectionHeader,
        sections: list[_SectionHeader],
        sym: SymbolEntry,
    ) -> str:
        """Resolve *sym*'s name through the table's linked string table."""
        if sh.sh_link >= len(sections):
            raise TruncatedStringTable(
                self._path, sh.sh_link, sh.sh_link + 1, len(sections),
                what=f"string table link of section {sh.index}",
                limit="section count is only",
            )
        strtab = sections[sh.sh_link]
        return self._view.read_cstring(
            strtab.sh_offset, strtab.sh_size, sym.st_name,
            error=TruncatedStringTable,
        )
