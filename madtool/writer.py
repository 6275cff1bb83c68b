from __future__ import annotations

import os
import tempfile
from typing import BinaryIO, Callable, List, Optional, Sequence, Union

from .constants import DATA_ALIGNMENT, HEADER_SIZE, MAX_U32
from .names import check_name
from .records import FileRecord


def _default_mode() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return 0o666 & ~mask


def _align(offset: int, alignment: int = DATA_ALIGNMENT) -> int:
    if offset % alignment != 0:
        offset += alignment - (offset % alignment)
    return offset


def calc_offsets(records: Sequence[FileRecord]) -> None:
    """Assign ``offset`` to every record, in order, right after the headers.

    Each data block starts on the next ``DATA_ALIGNMENT`` boundary at or
    after the end of the previous one; the first follows the header block.
    ``length`` must already be set.
    """
    offset = len(records) * HEADER_SIZE
    for rec in records:
        offset = _align(offset)
        if offset > MAX_U32 or rec.length > MAX_U32:
            raise ValueError(f"Archive too large: '{rec.display_name}' does not fit 32-bit offsets")
        rec.offset = offset
        offset += rec.length


# Called with ("header", record) or ("data", record) just before each write
ProgressFn = Callable[[str, FileRecord], None]


def write_archive(f: BinaryIO, records: Sequence[FileRecord], progress: Optional[ProgressFn] = None) -> int:
    """
    Serializes ``records`` (with offsets already assigned) to ``f``.

    Writes all headers first, then each record's data preceded by the zero
    padding needed to reach its offset. Nothing is written after the last
    data block.

    Returns:
        Total number of bytes written.
    """
    for rec in records:
        check_name(rec.name)
        if progress is not None:
            progress("header", rec)
        f.write(rec.pack())
    pos = len(records) * HEADER_SIZE
    for rec in records:
        if rec.data is None or len(rec.data) != rec.length:
            raise ValueError(f"Missing or mismatched data for '{rec.display_name}'")
        pad = rec.offset - pos
        if pad < 0:
            raise ValueError(f"Offset of '{rec.display_name}' overlaps preceding data")
        if progress is not None:
            progress("data", rec)
        f.write(b"\x00" * pad)
        f.write(rec.data)
        pos = rec.offset + rec.length
    return pos


class ArchiveWriter:
    """Collects files in memory and commits a complete archive in one pass.

    The archive is written to a temporary file beside ``out_path`` and moved
    into place only by ``finalize()``, so an existing archive is never
    replaced by a partial one.
    """

    def __init__(self, out_path: str):
        self.out_path = out_path
        self.records: List[FileRecord] = []
        self._tmp_path: Optional[str] = None
        self.finalized = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        if self._tmp_path is not None:
            try:
                os.unlink(self._tmp_path)
            except FileNotFoundError:
                pass
            self._tmp_path = None

    def add(self, name: Union[bytes, str], data: bytes) -> FileRecord:
        """Queue ``data`` under ``name``; names are validated here."""
        if self.finalized:
            raise RuntimeError("Archive already finalized")
        rec = FileRecord(name=check_name(name), length=len(data), data=bytes(data))
        self.records.append(rec)
        return rec

    def add_file(self, name: Union[bytes, str], fs_path: str) -> FileRecord:
        with open(fs_path, "rb") as rf:
            data = rf.read()
        return self.add(name, data)

    def finalize(self, progress: Optional[ProgressFn] = None) -> int:
        """Write headers and data, then atomically move the archive into place.

        Returns:
            Size of the written archive in bytes.
        """
        if self.finalized:
            raise RuntimeError("Archive already finalized")
        calc_offsets(self.records)
        out_dir = os.path.dirname(os.path.abspath(self.out_path))
        fd, self._tmp_path = tempfile.mkstemp(prefix=".madtool-", suffix=".tmp", dir=out_dir)
        # mkstemp creates 0600 files; give the archive the usual permissions
        os.chmod(self._tmp_path, _default_mode())
        with os.fdopen(fd, "wb") as f:
            size = write_archive(f, self.records, progress)
            f.flush()
            os.fsync(f.fileno())
        os.replace(self._tmp_path, self.out_path)
        self._tmp_path = None
        self.finalized = True
        return size
