from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Iterator, Mapping, Optional, Union

from .constants import HEADER_SIZE, MAX_STEP_TIME_MS, U8_MAX, U32_MAX, U64_MAX, VAR_MAX_DATA_LEN, VERSION_MAJOR
from .errors import (
    BadOffset,
    DataTooLarge,
    DocumentTooLarge,
    FrameDataSizeMismatch,
    InvalidChannelCount,
    InvalidStepTime,
    InvalidTimestamp,
    InvalidVersion,
)
from .frame import Frame
from .framestore import FrameStore
from .header import Header, parse_header
from .variables import Code, decode_variable_block, encode_variable_block, normalize_code


logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def system_clock_us() -> int:
    """Current wall-clock time in microseconds since the Unix epoch."""
    return time.time_ns() // 1000


class FseqDocument:
    """An uncompressed FSEQv2 sequence held in memory.

    Build one from scratch with a channel count and step time, then
    :meth:`add_variable` / :meth:`add_frame`; or decode a complete buffer
    with :meth:`from_bytes`. :meth:`to_bytes` produces the wire form.
    """

    def __init__(
        self,
        channel_count: int,
        step_time_ms: int,
        *,
        timestamp_us: Optional[int] = None,
        clock: Optional[Callable[[], int]] = None,
        version_minor: int = 0,
    ):
        if not 0 <= channel_count <= U32_MAX:
            raise InvalidChannelCount(f"channel count {channel_count} outside 0..{U32_MAX}")
        if not 0 <= step_time_ms <= MAX_STEP_TIME_MS:
            raise InvalidStepTime(f"step time {step_time_ms}ms outside 0..{MAX_STEP_TIME_MS}ms")
        if not 0 <= version_minor <= U8_MAX:
            raise InvalidVersion(f"minor version {version_minor} outside 0..{U8_MAX}")
        if timestamp_us is None:
            timestamp_us = (clock or system_clock_us)()
        if not 0 <= timestamp_us <= U64_MAX:
            raise InvalidTimestamp(f"timestamp {timestamp_us}us does not fit in 64 bits")
        self.version_minor: int = version_minor
        self.channel_count: int = channel_count
        self.frame_count: int = 0
        self.step_time_ms: int = step_time_ms
        self.timestamp_us: int = timestamp_us
        self.frame_store = FrameStore(channel_count)
        self.generation: int = 0
        self._variables: Dict[str, bytes] = {}

    # -------- decode / encode --------

    @classmethod
    def from_bytes(cls, buffer: Union[bytes, bytearray, memoryview]) -> FseqDocument:
        """Decode a complete FSEQv2 buffer.

        Raises:
            FormatError: header, variable block or frame data is malformed
                or uses an unsupported feature. No document is produced.
        """
        raw = memoryview(buffer)
        header = parse_header(raw[:HEADER_SIZE])
        var_off = header.variable_data_offset
        ch_off = header.channel_data_offset
        if var_off < HEADER_SIZE:
            raise BadOffset(f"variable data offset {var_off} overlaps the {HEADER_SIZE}-byte header")
        if ch_off < var_off:
            raise BadOffset(f"channel data offset {ch_off} precedes variable data offset {var_off}")
        if ch_off > len(raw):
            raise BadOffset(f"channel data offset {ch_off} beyond end of {len(raw)}-byte buffer")

        variables = decode_variable_block(raw[var_off:ch_off])

        frame_data = raw[ch_off:]
        expected = header.channel_count * header.frame_count
        if len(frame_data) != expected:
            raise FrameDataSizeMismatch(
                f"channel data block is {len(frame_data)} bytes; expected {expected} "
                f"({header.channel_count} channels x {header.frame_count} frames)"
            )

        doc = cls(
            header.channel_count,
            header.step_time_ms,
            timestamp_us=header.timestamp_us,
            version_minor=header.version_minor,
        )
        doc._variables = variables
        doc.frame_store = FrameStore(header.channel_count, frame_data)
        doc.frame_count = header.frame_count
        logger.debug("parsed %d bytes: %d variables, %d frames", len(raw), len(variables), doc.frame_count)
        return doc

    parse = from_bytes

    def to_bytes(self) -> bytes:
        """Encode header, padded variable block and frame data.

        Raises:
            DocumentTooLarge: the variable block pushes the channel data
                offset beyond 16 bits.
        """
        block = encode_variable_block(self._variables)
        header = Header(
            channel_data_offset=HEADER_SIZE + len(block),
            variable_data_offset=HEADER_SIZE,
            channel_count=self.channel_count,
            frame_count=self.frame_count,
            step_time_ms=self.step_time_ms,
            timestamp_us=self.timestamp_us,
            version_minor=self.version_minor,
        )
        out = header.pack() + block + self.frame_store.tobytes()
        logger.debug("serialized %d bytes (variable block %d, frame data %d)", len(out), len(block), len(self.frame_store))
        return out

    serialize = to_bytes

    # -------- metadata --------

    @property
    def version(self) -> str:
        return f"{VERSION_MAJOR}.{self.version_minor}"

    @property
    def num_channels(self) -> int:
        return self.channel_count

    @property
    def num_frames(self) -> int:
        return self.frame_count

    @property
    def created(self) -> datetime:
        return _EPOCH + timedelta(microseconds=self.timestamp_us)

    @property
    def step_duration(self) -> timedelta:
        return timedelta(milliseconds=self.step_time_ms)

    def total_duration(self) -> timedelta:
        return timedelta(milliseconds=self.total_duration_ms())

    def total_duration_ms(self) -> int:
        return self.step_time_ms * self.frame_count

    @property
    def variables(self) -> Mapping[str, bytes]:
        return MappingProxyType(self._variables)

    # -------- mutation --------

    def add_variable(self, code: Code, data: Union[bytes, str]) -> FseqDocument:
        code = normalize_code(code)
        if isinstance(data, str):
            data = data.encode("utf-8")
        if len(data) > VAR_MAX_DATA_LEN:
            raise DataTooLarge(f"variable {code!r} data is {len(data)} bytes; maximum is {VAR_MAX_DATA_LEN}")
        self._variables[code] = bytes(data)
        self.generation += 1
        return self

    def add_frame(self, frame_data: Iterable[int]) -> FseqDocument:
        if self.frame_count >= U32_MAX:
            raise DocumentTooLarge(f"frame count already at the {U32_MAX} maximum")
        self.frame_store.append(frame_data)
        self.frame_count += 1
        self.generation += 1
        return self

    # -------- frame access --------

    def frame(self, index: int = 0) -> Optional[Frame]:
        if index < 0 or index >= self.frame_count:
            return None
        return Frame(self, index)

    def frames(self) -> Iterator[Frame]:
        frame = self.frame(0)
        while frame is not None:
            yield frame
            frame = frame.next()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FseqDocument):
            return NotImplemented
        return (
            self.version_minor == other.version_minor
            and self.channel_count == other.channel_count
            and self.frame_count == other.frame_count
            and self.step_time_ms == other.step_time_ms
            and self.timestamp_us == other.timestamp_us
            and self._variables == other._variables
            and self.frame_store == other.frame_store
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"FseqDocument(version={self.version!r}, channels={self.channel_count}, "
            f"frames={self.frame_count}, step={self.step_time_ms}ms)"
        )


def parse(buffer: Union[bytes, bytearray, memoryview]) -> FseqDocument:
    return FseqDocument.from_bytes(buffer)


def serialize(document: FseqDocument) -> bytes:
    return document.to_bytes()
