"""
Undefsym Error Hierarchy
=========================

Every fatal condition the loader or the scanner can hit is expressed as a
subclass of :class:`UndefsymError`.  Benign conditions (a file too short
to be ELF, or one without the ELF magic) are *not* errors and never raise.

Hierarchy::

    UndefsymError
    ├── LoaderError
    │   ├── OpenError
    │   ├── StatError
    │   ├── MapError
    │   └── SyncError
    ├── ElfFormatError
    │   ├── InvalidClass
    │   └── UnsupportedEndianness
    └── ElfStructureError
        ├── OutOfBoundsError
        │   ├── TruncatedHeader
        │   ├── TruncatedSectionTable
        │   ├── TruncatedSymbolTable
        │   └── TruncatedStringTable
        └── InvalidEntrySize
"""

from __future__ import annotations


class UndefsymError(Exception):
    """Base class for all fatal per-file errors."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")

    @property
    def kind(self) -> str:
        """Short machine-readable error tag (the class name)."""
        return type(self).__name__


# ========================== I/O failures ===================================


class LoaderError(UndefsymError):
    """An OS-level failure while establishing or releasing the buffer.

    Args:
        path:   File the operation was applied to.
        action: The failing operation (``open``, ``fstat``, ``mmap`` ...).
        reason: Underlying OS error text.
    """

    def __init__(self, path: str, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(path, f"{action}() failed: {reason}")


class OpenError(LoaderError):
    """The path could not be opened."""


class StatError(LoaderError):
    """The file size could not be determined."""


class MapError(LoaderError):
    """The memory mapping could not be established."""


class SyncError(LoaderError):
    """Flushing the mapping back to storage failed."""


# ========================== Unsupported format =============================


class ElfFormatError(UndefsymError):
    """The file is ELF but uses a variant this tool does not handle."""


class InvalidClass(ElfFormatError):
    def __init__(self, path: str, value: int) -> None:
        self.value = value
        super().__init__(
            path,
            f"invalid ELF class {value} (expected 1 for ELF32 or 2 for ELF64)",
        )


class UnsupportedEndianness(ElfFormatError):
    def __init__(self, path: str, value: int) -> None:
        self.value = value
        super().__init__(
            path,
            f"unsupported ELF data encoding {value} "
            "(only little-endian objects are supported)",
        )


# ========================== Structural corruption ==========================


class ElfStructureError(UndefsymError):
    """The file's own bookkeeping is inconsistent with its contents."""


class OutOfBoundsError(ElfStructureError):
    """A computed byte range does not fit inside the buffer.

    Attributes:
        start: First byte of the offending range.
        end:   One past the last byte of the offending range.
        size:  Length of the region the range had to fit in.
    """

    what: str = "read"

    def __init__(
        self,
        path: str,
        start: int,
        end: int,
        size: int,
        what: str | None = None,
        limit: str = "file size is only",
    ) -> None:
        self.start = start
        self.end = end
        self.size = size
        if what is not None:
            self.what = what
        super().__init__(
            path,
            f"{self.what} (bytes {start}..{end}) would end at byte {end} "
            f"but {limit} {size}: {self.overrun} bytes out of bounds",
        )

    @property
    def overrun(self) -> int:
        """Number of bytes the range extends past the end of the region."""
        return max(0, self.end - self.size)


class TruncatedHeader(OutOfBoundsError):
    what = "ELF header"


class TruncatedSectionTable(OutOfBoundsError):
    what = "section header table"


class TruncatedSymbolTable(OutOfBoundsError):
    what = "symbol table"


class TruncatedStringTable(OutOfBoundsError):
    what = "string table"


class InvalidEntrySize(ElfStructureError):
    """A declared record size cannot hold the record for this ELF class."""

    def __init__(self, path: str, what: str, declared: int, expected: int) -> None:
        self.what = what
        self.declared = declared
        self.expected = expected
        super().__init__(
            path,
            f"{what} declares entry size {declared} "
            f"but this ELF class requires {expected}",
        )
