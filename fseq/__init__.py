"""
fseq — codec for uncompressed FSEQv2 sequence files.

Features:

- Fixed 32-byte header decode/encode with validation of unsupported features
  (compression, sparse ranges, flags, major versions other than 2).
- Tagged variable records (media file, creator, ...) decoded into a mapping and
  re-encoded into a zero-padded, 4-byte aligned block.
- Dense frame data with per-frame random access, forward iteration and
  differential hex dumps for inspecting shows.

The codec works purely on in-memory buffers; see fseq.cli for the file-level
front end.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "errors",
    "header",
    "variables",
    "document",
    "frame",
    "FseqDocument",
    "Frame",
    "parse",
    "serialize",
]

from .document import FseqDocument, parse, serialize
from .frame import Frame
