"""
madtool — reader/writer and CLI for the "MAD" archives used by the Hogs of War games.

Format summary:

- A run of fixed 24-byte file headers at offset 0 (name[12], reserved u32,
  offset u32, length u32; little endian) with no count field and no magic.
- The header run ends where the data of the earliest file begins.
- File data follows, each file starting on a 4-byte boundary, zero padded.

Member names are restricted to DOS-style characters; the same check is applied
when reading headers and when picking up files to archive, so extraction can
never write outside the chosen output directory.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "errors",
    "names",
    "records",
    "reader",
    "writer",
]

# Importable programmatic API is available via madtool.writer/madtool.reader and
# the CLI functions in madtool.cli (cmd_list/cmd_cat/cmd_extract/cmd_create).
