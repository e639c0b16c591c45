from __future__ import annotations

import argparse
import logging
import sys
from typing import List

from fseq.constants import DEFAULT_DUMP_CHANNELS
from fseq.document import FseqDocument
from fseq.errors import FseqError


def read_file_contents(path: str) -> bytes:
    """Read a whole sequence file into memory.

    Args:
        path: Filesystem path of the .fseq file.

    Raises:
        OSError: the file cannot be opened or read.
    """
    with open(path, "rb") as fh:
        return fh.read()


def write_file_contents(path: str, contents: bytes) -> None:
    with open(path, "wb") as fh:
        fh.write(contents)


def load(path: str) -> FseqDocument:
    return FseqDocument.from_bytes(read_file_contents(path))


def _format_ms(ms: int) -> str:
    return f"{ms}ms"


def _print_summary(doc: FseqDocument) -> None:
    for code, data in doc.variables.items():
        print(f"Variable:      {code}={data.decode('utf-8', errors='replace')}")
    print(f"Show created:  {doc.created.isoformat()}")
    print(f"Version:       {doc.version}")
    print(f"Channel count: {doc.channel_count}")
    print(f"Frame count:   {doc.frame_count}")
    print(f"Step duration: {_format_ms(doc.step_time_ms)}")
    print(f"Show duration: {doc.total_duration_ms() // 1000}s")


def cmd_info(path: str) -> bool:
    """Show sequence header information and variables.

    Args:
        path: Path to an .fseq file.
    """
    _print_summary(load(path))
    return True


def cmd_dump(path: str, *, channels: int = DEFAULT_DUMP_CHANNELS, show_all: bool = False) -> bool:
    """Print the summary followed by one line per frame.

    Args:
        path: Path to an .fseq file.
        channels: Maximum channels rendered per frame; 0 renders all of them.
        show_all: When False, each frame is diffed against the previous one and
            unchanged frames are omitted.
    """
    doc = load(path)
    _print_summary(doc)
    print("Frames:")
    previous = None
    for frame in doc.frames():
        line = frame.dump(channels, None if show_all else previous)
        if line:
            sys.stdout.write(line)
        previous = frame
    return True


def cmd_copy(path: str, output: str) -> bool:
    """Decode ``path`` and write the re-encoded sequence to ``output``.

    Args:
        path: Source .fseq file.
        output: Destination path; overwritten if it exists.
    """
    doc = load(path)
    data = doc.to_bytes()
    write_file_contents(output, data)
    print(f"Wrote {output} ({len(data)} bytes, {doc.frame_count} frames)")
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="fseq",
        description="FSEQv2 sequence file tool",
        epilog="Only uncompressed FSEQv2 files without sparse ranges are supported.",
    )
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_info = sub.add_parser("info", help="Show sequence information")
    ap_info.add_argument("path", help="Sequence path")

    ap_dump = sub.add_parser("dump", help="Show sequence information and frame data")
    ap_dump.add_argument("path", help="Sequence path")
    ap_dump.add_argument(
        "--channels",
        type=int,
        default=DEFAULT_DUMP_CHANNELS,
        help=f"Channels rendered per frame, 0 for all (default {DEFAULT_DUMP_CHANNELS})",
    )
    ap_dump.add_argument("--all", action="store_true", help="Print every frame in full instead of changes only")

    ap_copy = sub.add_parser("copy", help="Re-encode a sequence to a new file")
    ap_copy.add_argument("path", help="Sequence path")
    ap_copy.add_argument("output", help="Output .fseq path")

    args = ap.parse_args(argv)
    if args.cmd == "dump" and args.channels < 0:
        ap.error("--channels must be >= 0")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.cmd == "info":
            cmd_info(args.path)
        elif args.cmd == "dump":
            cmd_dump(args.path, channels=args.channels, show_all=args.all)
        elif args.cmd == "copy":
            cmd_copy(args.path, args.output)
        else:
            raise RuntimeError("Unknown command")
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except FseqError as e:
        print(f"Parse error: {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(2)
    except (RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
