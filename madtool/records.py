from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Optional

from .constants import HEADER_SIZE, NAME_FIELD_SIZE


# File header (fixed 24 bytes)
# struct: <12s I I I
#  - name[12]      NUL padded
#  - reserved u32  (purpose unknown, always zero in archives we write)
#  - offset u32
#  - length u32
_HDR_STRUCT = struct.Struct("<12sIII")
assert _HDR_STRUCT.size == HEADER_SIZE


@dataclass
class FileRecord:
    name: bytes
    offset: int = 0
    length: int = 0
    # Only set for records built for writing; read records fetch lazily
    data: Optional[bytes] = None

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def display_name(self) -> str:
        return self.name.decode("ascii", errors="backslashreplace")

    def pack(self) -> bytes:
        if len(self.name) > NAME_FIELD_SIZE:
            raise ValueError(f"Name too long for header: {self.name!r}")
        # struct pads the 12s field with NULs
        return _HDR_STRUCT.pack(self.name, 0, self.offset, self.length)


def unpack_header(raw: bytes) -> FileRecord:
    """Decode one 24-byte header; the name is returned unvalidated.

    The name field is a C string: it ends at the first NUL and any bytes
    after it are ignored.
    """
    name, _reserved, offset, length = _HDR_STRUCT.unpack(raw)
    return FileRecord(name=name.split(b"\x00", 1)[0], offset=offset, length=length)


def read_exact(f: BinaryIO, n: int) -> bytes:
    b = f.read(n)
    if len(b) != n:
        raise EOFError("Unexpected EOF")
    return b
