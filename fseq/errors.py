class FseqError(Exception):
    """Base class for FSEQ codec errors."""


class FormatError(FseqError):
    """The byte buffer is not a supported FSEQv2 document."""


# Header validation
class HeaderError(FormatError):
    pass


class BadSize(HeaderError):
    pass


class BadMagic(HeaderError):
    pass


class UnsupportedVersion(HeaderError):
    pass


class UnsupportedFlags(HeaderError):
    pass


class UnsupportedCompression(HeaderError):
    pass


class UnsupportedSparseRanges(HeaderError):
    pass


class BadOffset(HeaderError):
    pass


# Variable records
class TruncatedRecord(FormatError):
    pass


class BadRecordSize(TruncatedRecord):
    pass


class InvalidCodeLength(FseqError, ValueError):
    pass


class DataTooLarge(FseqError, ValueError):
    pass


class DocumentTooLarge(DataTooLarge):
    pass


# Frame data
class FrameDataSizeMismatch(FormatError):
    pass


class ChannelCountMismatch(FseqError, ValueError):
    pass


class InvalidChannelCount(FseqError, ValueError):
    pass


class InvalidStepTime(FseqError, ValueError):
    pass


class InvalidVersion(FseqError, ValueError):
    pass


class InvalidTimestamp(FseqError, ValueError):
    pass


class OutOfRange(FseqError, IndexError):
    pass


class StaleFrame(FseqError):
    pass
