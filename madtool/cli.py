from __future__ import annotations

import os
import sys
import argparse
from typing import BinaryIO, List, Optional

from madtool import __version__
from madtool.reader import ArchiveReader
from madtool.writer import ArchiveWriter
from madtool.names import name_ok, check_name
from madtool.errors import MadError, CorruptArchive, NotFound


def _scan_input_dir(indir: str, archive: str) -> List[os.DirEntry]:
    """Return the regular files of ``indir`` that can be stored, in directory order.

    Files whose names are not valid archive names are reported on stderr and
    skipped. The archive being written is never picked up as an input.
    """
    picked: List[os.DirEntry] = []
    archive_exists = os.path.exists(archive)
    with os.scandir(indir) as it:
        for entry in it:
            # Same test as `-f`: symlinks to regular files count
            if not entry.is_file():
                continue
            if archive_exists and os.path.samefile(entry.path, archive):
                continue
            if not name_ok(entry.name):
                print(f"Skipping {entry.name} - names must be in DOS format", file=sys.stderr)
                continue
            picked.append(entry)
    return picked


def cmd_list(archive: str) -> bool:
    """List archive members, one name per line, in header order.

    Args:
        archive: Path to a .mad file.
    """
    with ArchiveReader(archive) as r:
        for rec in r.list():
            print(rec.display_name)
    return True


def cmd_cat(archive: str, name: str, *, out: Optional[BinaryIO] = None) -> bool:
    """Write the raw bytes of one member to ``out`` (stdout by default).

    Args:
        archive: Path to a .mad file.
        name: Member name; the first matching header wins.
        out: Binary stream to write to.
    """
    with ArchiveReader(archive) as r:
        data = r.read(r.find(name))
    if out is None:
        out = sys.stdout.buffer
    out.write(data)
    out.flush()
    return True


def cmd_extract(archive: str, *, outdir: str = ".", exists: str = "overwrite", quiet: bool = False) -> bool:
    """Extract every member of an archive into ``outdir``.

    Args:
        archive: Path to a .mad file.
        outdir: Destination directory, created if missing.
        exists: What to do when a destination file exists: "overwrite",
            "skip" or "fail".
        quiet: Suppress per-file progress lines.
    """
    with ArchiveReader(archive) as r:
        records = r.list()
        os.makedirs(outdir, exist_ok=True)
        total = len(records)
        extracted = 0
        skipped = 0
        nbytes = 0
        for i, rec in enumerate(records, 1):
            dst = os.path.join(outdir, check_name(rec.name).decode("ascii"))
            if os.path.lexists(dst):
                if exists == "skip":
                    print(f"    skipping: {rec.display_name} (exists)")
                    skipped += 1
                    continue
                if exists == "fail":
                    raise MadError(f"Destination exists: {dst}")
                if exists != "overwrite":
                    raise ValueError(f"Unknown exists policy: {exists}")
            if not quiet:
                print(f" extracting: {i:>4}/{total:<4} {rec.display_name}")
            r.extract(rec, dst)
            extracted += 1
            nbytes += rec.length
    print(f"Done: extracted {extracted}/{total} files ({nbytes} bytes); skipped={skipped}")
    return True


def cmd_create(archive: str, indir: str = ".", *, quiet: bool = False) -> bool:
    """Create a new archive from the regular files of ``indir``.

    Args:
        archive: Path of the .mad file to write. An existing file is only
            replaced once the new archive has been written completely.
        indir: Directory to scan (not recursive).
        quiet: Suppress per-file progress lines.
    """
    entries = _scan_input_dir(indir, archive)
    if not entries:
        raise MadError(f"No files with valid names in {indir}; nothing to archive")
    def _progress(part: str, rec) -> None:
        print(f"Adding {rec.display_name} {part}...")

    with ArchiveWriter(archive) as w:
        for entry in entries:
            w.add_file(entry.name, entry.path)
        size = w.finalize(progress=None if quiet else _progress)
    print(f"Done: {len(w.records)} files, {size} bytes written to {archive}")
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="madtool",
        description="List, extract and create MAD archives (Hogs of War)",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_list = sub.add_parser("list", help="List archive contents")
    ap_list.add_argument("archive", help="Archive path")

    ap_cat = sub.add_parser("cat", help="Write one member to standard output")
    ap_cat.add_argument("archive", help="Archive path")
    ap_cat.add_argument("name", help="Member name")

    ap_extract = sub.add_parser("extract", help="Extract all members")
    ap_extract.add_argument("archive", help="Archive path")
    ap_extract.add_argument("outdir", nargs="?", default=".", help="Output directory (default: current directory)")
    ap_extract.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")
    ap_extract.add_argument(
        "--exists",
        choices=["overwrite", "skip", "fail"],
        default="overwrite",
        help="What to do if a destination file exists (default: overwrite)",
    )

    ap_create = sub.add_parser("create", help="Create archive from a directory")
    ap_create.add_argument("archive", help="Output archive path")
    ap_create.add_argument("indir", nargs="?", default=".", help="Input directory (default: current directory)")
    ap_create.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "list":
            cmd_list(args.archive)
        elif args.cmd == "cat":
            cmd_cat(args.archive, args.name)
        elif args.cmd == "extract":
            cmd_extract(args.archive, outdir=args.outdir, exists=args.exists, quiet=args.quiet)
        elif args.cmd == "create":
            cmd_create(args.archive, args.indir, quiet=args.quiet)
        else:
            raise RuntimeError("Unknown command")
    except NotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except CorruptArchive as e:
        print(
            f"Error: {e}\n"
            "Hint: the file is damaged or is not a MAD archive.",
            file=sys.stderr,
        )
        sys.exit(1)
    except (MadError, OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
