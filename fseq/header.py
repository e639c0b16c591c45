from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Tuple

from .constants import FSEQ_MAGIC, HEADER_SIZE, VERSION_MAJOR
from .errors import (
    BadMagic,
    BadSize,
    UnsupportedCompression,
    UnsupportedFlags,
    UnsupportedSparseRanges,
    UnsupportedVersion,
)


logger = logging.getLogger(__name__)


# Fixed header (32 bytes, little endian)
# struct: <4s H B B H I I B B B B B B Q
#  - magic[4] "PSEQ"
#  - ch_data_offset u16
#  - version_minor u8
#  - version_major u8
#  - var_data_offset u16
#  - channel_count u32
#  - frame_count u32
#  - step_time u8 (ms)
#  - flags u8
#  - compression u8: low nibble type, high nibble block count bits 8..11
#  - compression block count bits 0..7 u8
#  - sparse_range_count u8
#  - reserved u8
#  - timestamp_us u64
_HEADER_STRUCT = struct.Struct("<4sHBBHIIBBBBBBQ")
assert _HEADER_STRUCT.size == HEADER_SIZE

_COMPRESSION_TYPE_MASK = 0x0F
_BLOCK_COUNT_HI_SHIFT = 4


def split_compression(byte20: int, byte21: int) -> Tuple[int, int]:
    """Return ``(compression_type, compression_block_count)`` from the packed byte pair."""
    compression_type = byte20 & _COMPRESSION_TYPE_MASK
    block_count = ((byte20 >> _BLOCK_COUNT_HI_SHIFT) << 8) | byte21
    return compression_type, block_count


def join_compression(compression_type: int, block_count: int) -> Tuple[int, int]:
    byte20 = (compression_type & _COMPRESSION_TYPE_MASK) | (((block_count >> 8) & 0x0F) << _BLOCK_COUNT_HI_SHIFT)
    byte21 = block_count & 0xFF
    return byte20, byte21


@dataclass
class Header:
    channel_data_offset: int
    variable_data_offset: int
    channel_count: int
    frame_count: int
    step_time_ms: int
    timestamp_us: int
    version_minor: int = 0
    version_major: int = VERSION_MAJOR
    reserved: int = 0

    def pack(self) -> bytes:
        # Unsupported features are never written
        comp_byte, block_lo = join_compression(0, 0)
        return _HEADER_STRUCT.pack(
            FSEQ_MAGIC,
            self.channel_data_offset,
            self.version_minor,
            VERSION_MAJOR,
            self.variable_data_offset,
            self.channel_count,
            self.frame_count,
            self.step_time_ms,
            0,  # flags
            comp_byte,
            block_lo,
            0,  # sparse_range_count
            0,  # reserved
            self.timestamp_us,
        )


def parse_header(raw: bytes) -> Header:
    """Decode and validate the fixed 32-byte header.

    Args:
        raw: Exactly ``HEADER_SIZE`` bytes taken from the start of a document.

    Returns:
        The decoded :class:`Header`.

    Raises:
        BadSize, BadMagic, UnsupportedVersion, UnsupportedFlags,
        UnsupportedCompression, UnsupportedSparseRanges.
    """
    if len(raw) != HEADER_SIZE:
        raise BadSize(f"header must be {HEADER_SIZE} bytes, got {len(raw)}")
    (
        magic,
        ch_off,
        vmin,
        vmaj,
        var_off,
        channels,
        frames,
        step,
        flags,
        comp_byte,
        block_lo,
        sparse,
        reserved,
        ts_us,
    ) = _HEADER_STRUCT.unpack(bytes(raw))
    if magic != FSEQ_MAGIC:
        raise BadMagic(f"bad magic {magic!r}, expected {FSEQ_MAGIC!r}")
    if vmaj != VERSION_MAJOR:
        raise UnsupportedVersion(f"major version {vmaj} not supported; expected {VERSION_MAJOR}")
    if flags != 0:
        raise UnsupportedFlags(f"non-zero flags field not supported: 0x{flags:02x}")
    comp_type, block_count = split_compression(comp_byte, block_lo)
    if comp_type != 0:
        raise UnsupportedCompression(f"compression type {comp_type} not supported")
    if block_count != 0:
        raise UnsupportedCompression(f"compression blocks present ({block_count}); unsupported")
    if sparse != 0:
        raise UnsupportedSparseRanges(f"sparse channel ranges not supported ({sparse} present)")
    logger.debug(
        "header: v%d.%d channels=%d frames=%d step=%dms var_off=%d ch_off=%d",
        vmaj,
        vmin,
        channels,
        frames,
        step,
        var_off,
        ch_off,
    )
    return Header(
        channel_data_offset=ch_off,
        variable_data_offset=var_off,
        channel_count=channels,
        frame_count=frames,
        step_time_ms=step,
        timestamp_us=ts_us,
        version_minor=vmin,
        version_major=vmaj,
        reserved=reserved,
    )
