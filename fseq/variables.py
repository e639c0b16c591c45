from __future__ import annotations

"""
Variable records and the variable block.

Encoding
- Record: u16 size (LE) || code[2] || data[size - 4]
- size counts the 4 header bytes; size == 0 marks the end of the block
- Block: records in mapping order, zero padded to a multiple of 4 bytes

Common codes written by sequencers
- mf: media file name
- sp: sequence producer (creator application)
"""

import logging
import struct
from dataclasses import dataclass
from typing import Dict, Mapping, Union

from .constants import (
    HEADER_SIZE,
    U16_MAX,
    VAR_BLOCK_ALIGN,
    VAR_CODE_ENCODING,
    VAR_CODE_LEN,
    VAR_HEADER_LEN,
    VAR_MAX_DATA_LEN,
    VAR_SIZE_LEN,
)
from .errors import (
    BadRecordSize,
    DataTooLarge,
    DocumentTooLarge,
    InvalidCodeLength,
    TruncatedRecord,
)


logger = logging.getLogger(__name__)

_VAR_SIZE_STRUCT = struct.Struct("<H")

Code = Union[str, bytes]


@dataclass
class Variable:
    size: int = 0
    code: str = ""
    data: bytes = b""

    @property
    def is_end(self) -> bool:
        return self.size == 0


def normalize_code(code: Code) -> str:
    """Return ``code`` as a two-character ``str``; raise InvalidCodeLength otherwise."""
    if isinstance(code, (bytes, bytearray)):
        raw = bytes(code)
    else:
        try:
            raw = code.encode(VAR_CODE_ENCODING)
        except UnicodeEncodeError:
            raise InvalidCodeLength(f"variable code {code!r} is not {VAR_CODE_LEN} bytes")
    if len(raw) != VAR_CODE_LEN:
        raise InvalidCodeLength(f"variable code {code!r} is {len(raw)} bytes; expected {VAR_CODE_LEN}")
    return raw.decode(VAR_CODE_ENCODING)


def parse_variable(raw: bytes) -> Variable:
    """Decode the record at the start of ``raw``.

    Returns a zero-size sentinel when fewer than 4 bytes remain or the size
    field is zero (trailing padding).
    """
    if len(raw) < VAR_HEADER_LEN:
        return Variable()
    (size,) = _VAR_SIZE_STRUCT.unpack_from(raw, 0)
    if size == 0:
        return Variable()
    if size < VAR_HEADER_LEN:
        raise BadRecordSize(f"variable record declares size {size}, smaller than its {VAR_HEADER_LEN}-byte header")
    code = bytes(raw[VAR_SIZE_LEN:VAR_HEADER_LEN]).decode(VAR_CODE_ENCODING)
    data_len = size - VAR_HEADER_LEN
    if len(raw) - VAR_HEADER_LEN < data_len:
        raise TruncatedRecord(
            f"variable {code!r} declares {data_len} data bytes but only {len(raw) - VAR_HEADER_LEN} remain"
        )
    return Variable(size=size, code=code, data=bytes(raw[VAR_HEADER_LEN : VAR_HEADER_LEN + data_len]))


def serialize_variable(code: Code, data: bytes) -> bytes:
    code = normalize_code(code)
    if len(data) > VAR_MAX_DATA_LEN:
        raise DataTooLarge(f"variable {code!r} data is {len(data)} bytes; maximum is {VAR_MAX_DATA_LEN}")
    size = VAR_HEADER_LEN + len(data)
    return _VAR_SIZE_STRUCT.pack(size) + code.encode(VAR_CODE_ENCODING) + bytes(data)


def decode_variable_block(raw: bytes) -> Dict[str, bytes]:
    """Decode every record in ``raw`` into a ``code -> data`` mapping.

    Later records with a duplicate code replace earlier ones.
    """
    variables: Dict[str, bytes] = {}
    view = memoryview(raw)
    pos = 0
    count = 0
    while pos < len(view):
        var = parse_variable(view[pos:])
        if var.is_end:
            break
        if var.code in variables:
            logger.debug("variable %r repeated at offset %d; keeping the later value", var.code, pos)
        variables[var.code] = var.data
        pos += var.size
        count += 1
    logger.debug("decoded %d variable records from %d bytes", count, len(raw))
    return variables


def padded_length(n: int) -> int:
    return (n + VAR_BLOCK_ALIGN - 1) // VAR_BLOCK_ALIGN * VAR_BLOCK_ALIGN


def encode_variable_block(variables: Mapping[Code, bytes]) -> bytes:
    """Encode ``variables`` in iteration order, zero padded to a multiple of 4.

    Raises:
        InvalidCodeLength: a code is not two bytes.
        DataTooLarge: a single record exceeds the u16 size field.
        DocumentTooLarge: header plus block would overflow the u16 channel data offset.
    """
    block = bytearray()
    for code, data in variables.items():
        block += serialize_variable(code, data)
    block += b"\x00" * (padded_length(len(block)) - len(block))
    if HEADER_SIZE + len(block) > U16_MAX:
        raise DocumentTooLarge(
            f"variable block of {len(block)} bytes puts channel data at offset {HEADER_SIZE + len(block)}, beyond {U16_MAX}"
        )
    return bytes(block)
