"""
Memory-Mapped File Loader
==========================

Maps an input file into memory for the duration of one scan and hands the
scanner a bounds-checked view over it.

The mapping is read-only unless write-back is requested, in which case
the file is opened read/write, mapped with ``ACCESS_WRITE`` and flushed
to storage once the scan finishes successfully.  The scanner never
modifies the buffer, so the flush writes back identical bytes.

The descriptor and the mapping are released on every exit path.
"""

from __future__ import annotations

import errno
import mmap
import os
import stat
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Optional

from shared.logger import ToolLogger

from undefsym.core.errors import MapError, OpenError, StatError, SyncError
from undefsym.parsers.buffer import ByteView
from undefsym.parsers.elf_layout import MIN_HEADER_SIZE


@dataclass(slots=True)
class ObjectFile:
    """One file currently mapped for analysis.

    Attributes:
        path: Path as given by the caller.
        size: Byte length of the mapping; never changes.
        view: Bounds-checked accessor over the mapped bytes.
    """
    path: str
    size: int
    view: ByteView


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)


class FileLoader:
    """Opens and maps files one at a time.

    Usage::

        loader = FileLoader()
        with loader.open("/usr/lib/libfoo.so") as obj:
            if obj is None:
                ...  # too small to be ELF
            else:
                scan(obj.view)

    Args:
        write_back: Open read/write and flush the mapping after a
            successful scan.
        logger: Logger for debug tracing.
    """

    def __init__(
        self,
        *,
        write_back: bool = False,
        logger: ToolLogger | None = None,
    ) -> None:
        self._write_back = write_back
        self._logger: ToolLogger = logger or ToolLogger("loader")

    @property
    def write_back(self) -> bool:
        return self._write_back

    @contextmanager
    def open(self, path: str) -> Generator[Optional[ObjectFile], None, None]:
        """Map *path* and yield an :class:`ObjectFile`.

        Yields ``None`` when the file is shorter than the smallest ELF
        header, since such a file cannot be an ELF object.

        Raises:
            OpenError: The path cannot be opened or is not a regular file.
            StatError: ``fstat`` failed.
            MapError: ``mmap`` failed.
            SyncError: Flushing the mapping failed (write-back only).
        """
        # O_NONBLOCK: open() must not wait for a writer on a FIFO.
        flags = (os.O_RDWR if self._write_back else os.O_RDONLY) | os.O_NONBLOCK
        try:
            fd = os.open(path, flags)
        except OSError as exc:
            raise OpenError(path, "open", _reason(exc)) from exc

        try:
            try:
                st = os.fstat(fd)
            except OSError as exc:
                raise StatError(path, "fstat", _reason(exc)) from exc

            if stat.S_ISDIR(st.st_mode):
                raise OpenError(path, "open", os.strerror(errno.EISDIR))
            if not stat.S_ISREG(st.st_mode):
                raise OpenError(path, "open", "not a regular file")

            size = st.st_size
            if size < MIN_HEADER_SIZE:
                self._logger.debug("%s: %d bytes, not mapping", path, size)
                yield None
                return

            access = mmap.ACCESS_WRITE if self._write_back else mmap.ACCESS_READ
            try:
                mapping = mmap.mmap(fd, size, access=access)
            except (OSError, ValueError) as exc:
                reason = _reason(exc) if isinstance(exc, OSError) else str(exc)
                raise MapError(path, "mmap", reason) from exc

            self._logger.debug(
                "%s: mapped %d bytes (%s)",
                path, size, "read/write" if self._write_back else "read-only",
            )
            try:
                yield ObjectFile(path=path, size=size, view=ByteView(mapping, path))
                if self._write_back:
                    try:
                        mapping.flush()
                    except OSError as exc:
                        raise SyncError(path, "msync", _reason(exc)) from exc
            finally:
                mapping.close()
        finally:
            os.close(fd)
