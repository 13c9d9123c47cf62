"""
ELF Structure Layouts
======================

ELF defines parallel 32-bit and 64-bit layouts for the file header, the
section header and the symbol record.  The field *names* are identical;
only their widths (and, for symbols, their order) differ.

:class:`ElfLayout` captures one width as a set of precompiled
:class:`struct.Struct` objects plus the field names they decode to.  The
scanner picks a layout exactly once from the class byte and then runs a
single width-independent algorithm against it.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - Linux man page: elf(5).
"""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Any


# ---------------------------------------------------------------------------
# Identification
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"
EI_NIDENT: int = 16
EI_CLASS: int = 4
EI_DATA: int = 5

# Data encoding; only little-endian objects are supported
ELFDATA2LSB: int = 1


class ElfClass(int, enum.Enum):
    """Object file class, from ``e_ident[EI_CLASS]``."""
    ELF32 = 1
    ELF64 = 2

    @property
    def bits(self) -> int:
        return 32 if self is ElfClass.ELF32 else 64


# ---------------------------------------------------------------------------
# Field names shared by both widths
# ---------------------------------------------------------------------------

_EHDR_FIELDS: tuple[str, ...] = (
    "e_type", "e_machine", "e_version", "e_entry",
    "e_phoff", "e_shoff", "e_flags", "e_ehsize",
    "e_phentsize", "e_phnum", "e_shentsize", "e_shnum",
    "e_shstrndx",
)

_SHDR_FIELDS: tuple[str, ...] = (
    "sh_name", "sh_type", "sh_flags", "sh_addr",
    "sh_offset", "sh_size", "sh_link", "sh_info",
    "sh_addralign", "sh_entsize",
)


@dataclass(frozen=True, slots=True)
class ElfLayout:
    """Record formats for one ELF width.

    Attributes:
        elf_class: The class this layout decodes.
        ehdr: File header, *excluding* the 16 identification bytes.
        shdr: One section header record.
        sym: One symbol table record.
        sym_fields: Names of the values ``sym`` unpacks to, in order.
    """
    elf_class: ElfClass
    ehdr: struct.Struct
    shdr: struct.Struct
    sym: struct.Struct
    sym_fields: tuple[str, ...]

    @property
    def header_size(self) -> int:
        """Full size of the file header including ``e_ident``."""
        return EI_NIDENT + self.ehdr.size

    @property
    def shdr_size(self) -> int:
        return self.shdr.size

    @property
    def sym_size(self) -> int:
        return self.sym.size

    def decode_header(self, values: tuple[Any, ...]) -> dict[str, int]:
        return dict(zip(_EHDR_FIELDS, values))

    def decode_section(self, values: tuple[Any, ...]) -> dict[str, int]:
        return dict(zip(_SHDR_FIELDS, values))

    def decode_symbol(self, values: tuple[Any, ...]) -> dict[str, int]:
        return dict(zip(self.sym_fields, values))


# Elf32_Ehdr (52 bytes), Elf32_Shdr (40 bytes), Elf32_Sym (16 bytes)
ELF32_LAYOUT = ElfLayout(
    elf_class=ElfClass.ELF32,
    ehdr=struct.Struct("<HHIIIIIHHHHHH"),
    shdr=struct.Struct("<IIIIIIIIII"),
    sym=struct.Struct("<IIIBBH"),
    sym_fields=(
        "st_name", "st_value", "st_size",
        "st_info", "st_other", "st_shndx",
    ),
)

# Elf64_Ehdr (64 bytes), Elf64_Shdr (64 bytes), Elf64_Sym (24 bytes)
ELF64_LAYOUT = ElfLayout(
    elf_class=ElfClass.ELF64,
    ehdr=struct.Struct("<HHIQQQIHHHHHH"),
    shdr=struct.Struct("<IIQQQQIIQQ"),
    sym=struct.Struct("<IBBHQQ"),
    sym_fields=(
        "st_name", "st_info", "st_other",
        "st_shndx", "st_value", "st_size",
    ),
)

LAYOUTS: dict[ElfClass, ElfLayout] = {
    ElfClass.ELF32: ELF32_LAYOUT,
    ElfClass.ELF64: ELF64_LAYOUT,
}

# Anything shorter than the smallest header cannot be an ELF object.
MIN_HEADER_SIZE: int = ELF32_LAYOUT.header_size
