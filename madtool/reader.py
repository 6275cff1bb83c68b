from __future__ import annotations

import os
from typing import BinaryIO, List, Optional, Union

from .constants import HEADER_SIZE
from .errors import CorruptArchive, MadError, NotFound, TruncatedArchive
from .names import name_ok
from .records import FileRecord, read_exact, unpack_header


def _stream_size(f: BinaryIO) -> int:
    pos = f.tell()
    end = f.seek(0, os.SEEK_END)
    f.seek(pos)
    return end


def _more_headers(position: int, min_offset: int) -> bool:
    # Another header may follow only while we have not reached the data of
    # any record seen so far.
    return position < min_offset


def _read_header(f: BinaryIO) -> FileRecord:
    try:
        raw = read_exact(f, HEADER_SIZE)
    except EOFError:
        raise TruncatedArchive("Couldn't read full header - truncated MAD file?") from None
    rec = unpack_header(raw)
    # Guards extraction against names that would leave the output directory
    if not name_ok(rec.name):
        raise CorruptArchive(f"Unexpected characters in filename ({rec.display_name}) - corrupt MAD file?")
    return rec


def load_index(f: BinaryIO) -> List[FileRecord]:
    """
    Reads the header block from the start of an archive.

    The format stores no entry count. Headers are read back to back until
    the stream position reaches the smallest data offset declared so far,
    i.e. until the next header would overlap data that belongs to an
    already-read record. The walk is also bounded by the stream size so that
    offsets pointing past end-of-file end in TruncatedArchive instead of
    reading indefinitely.

    Returns:
        Records in header order, without data loaded.
    """
    size = _stream_size(f)
    f.seek(0)
    records = [_read_header(f)]
    min_offset = records[0].offset
    while _more_headers(f.tell(), min_offset):
        if f.tell() + HEADER_SIZE > size:
            raise TruncatedArchive(
                f"Header block runs past end of file at offset {f.tell()} "
                f"(first data expected at {min_offset}) - truncated MAD file?"
            )
        rec = _read_header(f)
        records.append(rec)
        min_offset = min(min_offset, rec.offset)
    return records


def read_data(f: BinaryIO, record: FileRecord) -> bytes:
    """Return exactly ``record.length`` bytes stored at ``record.offset``."""
    try:
        f.seek(record.offset)
    except (OSError, ValueError, OverflowError) as exc:
        raise CorruptArchive(f"Couldn't seek to data for '{record.display_name}' - corrupt MAD file?") from exc
    try:
        return read_exact(f, record.length)
    except EOFError:
        raise TruncatedArchive(f"Unexpected EOF reading data for '{record.display_name}' - corrupt MAD file?") from None


class ArchiveReader:
    def __init__(self, path: str):
        self.path = path
        self.f: Optional[BinaryIO] = None
        self.records: List[FileRecord] = []

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.f is not None:
            return
        self.f = open(self.path, "rb")
        try:
            self.records = load_index(self.f)
        except (MadError, OSError, ValueError):
            # Ensure file handle is closed on failure to avoid leaks
            self.close()
            raise

    def close(self):
        if self.f is not None:
            self.f.close()
            self.f = None

    def list(self) -> List[FileRecord]:
        return self.records

    def names(self) -> List[str]:
        return [rec.display_name for rec in self.records]

    def find(self, name: Union[bytes, str]) -> FileRecord:
        """Return the first record called ``name``; raise NotFound if absent."""
        key = name.encode("ascii", errors="replace") if isinstance(name, str) else bytes(name)
        for rec in self.records:
            if rec.name == key:
                return rec
        raise NotFound(name if isinstance(name, str) else name.decode("ascii", errors="backslashreplace"))

    def read(self, record: FileRecord) -> bytes:
        if self.f is None:
            raise RuntimeError("Archive not open")
        return read_data(self.f, record)

    def extract(self, record: FileRecord, out_path: str):
        # Fetch first so a damaged archive never leaves a short file behind
        data = self.read(record)
        # Never write through a symlink left at the destination
        if os.path.islink(out_path):
            os.unlink(out_path)
        flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_NOFOLLOW", 0) | getattr(os, "O_BINARY", 0)
        with os.fdopen(os.open(out_path, flags, 0o666), "wb") as wf:
            wf.write(data)
