from __future__ import annotations

from typing import Union

from .constants import MAX_NAME_LEN, NAME_CHARS


def name_ok(name: Union[bytes, str]) -> bool:
    """Return True when ``name`` may be stored in (or extracted from) an archive.

    The same check guards both directions: headers read from an archive and
    files picked up by ``create``. Names are 1-12 characters drawn from
    ``NAME_CHARS``, so they can never contain a path separator, a NUL or any
    other control character. ``.`` and ``..`` are refused as well since they
    name directories, not files.
    """
    if isinstance(name, str):
        try:
            name = name.encode("ascii")
        except UnicodeEncodeError:
            return False
    if not 1 <= len(name) <= MAX_NAME_LEN:
        return False
    if name in (b".", b".."):
        return False
    return all(c in NAME_CHARS for c in name)


def check_name(name: Union[bytes, str]) -> bytes:
    """Validate ``name`` and return it as bytes; raise ValueError otherwise."""
    if not name_ok(name):
        raise ValueError(f"Invalid archive name: {name!r}")
    if isinstance(name, str):
        return name.encode("ascii")
    return bytes(name)
