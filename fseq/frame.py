from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Optional

from .constants import (
    DUMP_BLANK_CHANNEL,
    DUMP_OFFSET_WIDTH,
    DUMP_TRUNCATED_MARK,
)
from .errors import OutOfRange, StaleFrame

if TYPE_CHECKING:
    from .document import FseqDocument


class Frame:
    """Read-only cursor over one frame of a document.

    A frame borrows from its document. Any ``add_variable`` or ``add_frame``
    on the document afterwards makes the frame stale; using it then raises
    :class:`StaleFrame`.
    """

    __slots__ = ("_doc", "_index", "_generation")

    def __init__(self, doc: FseqDocument, index: int):
        self._doc = doc
        self._index = index
        self._generation = doc.generation

    def __repr__(self) -> str:
        return f"Frame(index={self._index})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return self._doc is other._doc and self._index == other._index

    __hash__ = None  # type: ignore[assignment]

    def _check(self) -> FseqDocument:
        if self._generation != self._doc.generation:
            raise StaleFrame(f"frame {self._index} was taken before the document was modified")
        return self._doc

    @property
    def index(self) -> int:
        return self._index

    def offset(self) -> timedelta:
        """Playback offset of this frame from the start of the show."""
        doc = self._check()
        return timedelta(milliseconds=doc.step_time_ms * self._index)

    def offset_ms(self) -> int:
        doc = self._check()
        return doc.step_time_ms * self._index

    def channel_data(self, channel_index: int) -> int:
        doc = self._check()
        if channel_index < 0 or channel_index >= doc.channel_count:
            raise OutOfRange(f"channel {channel_index} outside 0..{doc.channel_count - 1}")
        return doc.frame_store[self._index * doc.channel_count + channel_index]

    def data(self) -> bytes:
        doc = self._check()
        return doc.frame_store.frame_slice(self._index)

    def next(self) -> Optional[Frame]:
        doc = self._check()
        return doc.frame(self._index + 1)

    def dump(self, max_channels: int = 0, previous: Optional[Frame] = None) -> str:
        """Render one line: offset, then channel values in hex.

        Args:
            max_channels: Render at most this many channels (0 renders all);
                " ..." marks a truncated line.
            previous: When given, channels equal to ``previous`` render blank.

        Returns:
            The line with a trailing newline, or "" when no channel value is
            rendered (nothing changed relative to ``previous``).
        """
        values = self.data()
        prev_values = previous.data() if previous is not None else None
        parts = []
        truncated = False
        for ch, value in enumerate(values):
            if max_channels and ch >= max_channels:
                truncated = True
                break
            if prev_values is not None and ch < len(prev_values) and prev_values[ch] == value:
                parts.append(DUMP_BLANK_CHANNEL)
                continue
            parts.append(f" {value:02x}")
        ch_data = "".join(parts)
        if not ch_data.strip():
            return ""
        offset = f"{self.offset_ms()}ms"
        return f"{offset:>{DUMP_OFFSET_WIDTH}} [{ch_data}{DUMP_TRUNCATED_MARK if truncated else ''}]\n"
