from __future__ import annotations

from typing import Iterable

from .errors import ChannelCountMismatch, OutOfRange


class FrameStore:
    """Contiguous channel bytes, one run of ``channel_count`` bytes per frame."""

    def __init__(self, channel_count: int, data: bytes = b""):
        self.channel_count = channel_count
        self._data = bytearray(data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FrameStore):
            return NotImplemented
        return self.channel_count == other.channel_count and self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __getitem__(self, offset: int) -> int:
        if offset < 0 or offset >= len(self._data):
            raise OutOfRange(f"frame data offset {offset} outside 0..{len(self._data) - 1}")
        return self._data[offset]

    def frame_slice(self, frame_index: int) -> bytes:
        start = frame_index * self.channel_count
        end = start + self.channel_count
        if frame_index < 0 or end > len(self._data):
            raise OutOfRange(f"frame {frame_index} outside frame data of {len(self._data)} bytes")
        return bytes(self._data[start:end])

    def append(self, frame: Iterable[int]) -> None:
        if isinstance(frame, int):
            raise TypeError(f"frame must be a sequence of channel values, not int {frame}")
        raw = bytes(frame)
        if len(raw) != self.channel_count:
            raise ChannelCountMismatch(f"frame has {len(raw)} channels; expected {self.channel_count}")
        self._data += raw

    def tobytes(self) -> bytes:
        return bytes(self._data)
