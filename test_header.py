from __future__ import annotations

import struct
import unittest

from fseq.header import Header, join_compression, parse_header, split_compression
from fseq.errors import (
    BadMagic,
    BadSize,
    HeaderError,
    UnsupportedCompression,
    UnsupportedFlags,
    UnsupportedSparseRanges,
    UnsupportedVersion,
)


def _raw_header(**overrides) -> bytearray:
    fields = dict(
        magic=b"PSEQ",
        ch_off=40,
        vmin=1,
        vmaj=2,
        var_off=32,
        channels=512,
        frames=1000,
        step=25,
        flags=0,
        comp=0,
        block_lo=0,
        sparse=0,
        reserved=0,
        ts=123456789,
    )
    fields.update(overrides)
    return bytearray(struct.pack("<4sHBBHIIBBBBBBQ", *fields.values()))


class HeaderParseTests(unittest.TestCase):
    def test_parse_fields(self):
        h = parse_header(bytes(_raw_header()))
        self.assertEqual(h.channel_data_offset, 40)
        self.assertEqual(h.variable_data_offset, 32)
        self.assertEqual(h.version_minor, 1)
        self.assertEqual(h.version_major, 2)
        self.assertEqual(h.channel_count, 512)
        self.assertEqual(h.frame_count, 1000)
        self.assertEqual(h.step_time_ms, 25)
        self.assertEqual(h.timestamp_us, 123456789)

    def test_size_must_be_exact(self):
        raw = bytes(_raw_header())
        with self.assertRaises(BadSize):
            parse_header(raw[:31])
        with self.assertRaises(BadSize):
            parse_header(raw + b"\x00")

    def test_rejections(self):
        cases = [
            (dict(magic=b"PSEX"), BadMagic),
            (dict(vmaj=1), UnsupportedVersion),
            (dict(vmaj=3), UnsupportedVersion),
            (dict(flags=0x80), UnsupportedFlags),
            (dict(comp=0x01), UnsupportedCompression),
            (dict(comp=0x02), UnsupportedCompression),
            (dict(comp=0x10), UnsupportedCompression),
            (dict(block_lo=1), UnsupportedCompression),
            (dict(sparse=2), UnsupportedSparseRanges),
        ]
        for overrides, exc in cases:
            with self.subTest(overrides=overrides):
                with self.assertRaises(exc):
                    parse_header(bytes(_raw_header(**overrides)))
                with self.assertRaises(HeaderError):
                    parse_header(bytes(_raw_header(**overrides)))

    def test_magic_checked_before_version(self):
        with self.assertRaises(BadMagic):
            parse_header(bytes(_raw_header(magic=b"FSEQ", vmaj=1)))

    def test_reserved_byte_is_ignored(self):
        h = parse_header(bytes(_raw_header(reserved=0x5A)))
        self.assertEqual(h.reserved, 0x5A)


class HeaderPackTests(unittest.TestCase):
    def test_pack_layout(self):
        h = Header(
            channel_data_offset=76,
            variable_data_offset=32,
            channel_count=4,
            frame_count=4,
            step_time_ms=20,
            timestamp_us=1742822121000000,
        )
        raw = h.pack()
        self.assertEqual(len(raw), 32)
        self.assertEqual(raw[0:4], b"PSEQ")
        self.assertEqual(struct.unpack_from("<H", raw, 4)[0], 76)
        self.assertEqual(raw[6], 0)
        self.assertEqual(raw[7], 2)
        self.assertEqual(struct.unpack_from("<H", raw, 8)[0], 32)
        self.assertEqual(struct.unpack_from("<II", raw, 10), (4, 4))
        self.assertEqual(raw[18], 20)
        self.assertEqual(raw[19:24], b"\x00" * 5)
        self.assertEqual(struct.unpack_from("<Q", raw, 24)[0], 1742822121000000)
        self.assertEqual(parse_header(raw), h)

    def test_pack_never_writes_unsupported_fields(self):
        h = Header(
            channel_data_offset=32,
            variable_data_offset=32,
            channel_count=1,
            frame_count=0,
            step_time_ms=50,
            timestamp_us=0,
            version_minor=2,
            version_major=9,
            reserved=7,
        )
        raw = h.pack()
        self.assertEqual(raw[7], 2)
        self.assertEqual(raw[6], 2)
        self.assertEqual(raw[23], 0)


class CompressionBitsTests(unittest.TestCase):
    def test_split(self):
        self.assertEqual(split_compression(0x00, 0x00), (0, 0))
        self.assertEqual(split_compression(0x01, 0x00), (1, 0))
        self.assertEqual(split_compression(0x21, 0x05), (1, 0x205))
        self.assertEqual(split_compression(0xF0, 0xFF), (0, 0xFFF))

    def test_join_matches_split(self):
        self.assertEqual(join_compression(2, 0x3AB), (0x32, 0xAB))
        self.assertEqual(split_compression(*join_compression(2, 0x3AB)), (2, 0x3AB))


if __name__ == "__main__":
    unittest.main()
