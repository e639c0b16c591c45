from __future__ import annotations

import struct
import unittest

from fseq.variables import (
    Variable,
    decode_variable_block,
    encode_variable_block,
    normalize_code,
    padded_length,
    parse_variable,
    serialize_variable,
)
from fseq.errors import (
    BadRecordSize,
    DataTooLarge,
    DocumentTooLarge,
    InvalidCodeLength,
    TruncatedRecord,
)


class VariableRecordTests(unittest.TestCase):
    def test_serialize_layout(self):
        raw = serialize_variable("mf", b"deadbeefcafe.wav")
        self.assertEqual(raw[:2], struct.pack("<H", 20))
        self.assertEqual(raw[2:4], b"mf")
        self.assertEqual(raw[4:], b"deadbeefcafe.wav")

    def test_parse_one(self):
        raw = serialize_variable(b"sp", b"VLT creator v0.0.7") + b"trailing"
        var = parse_variable(raw)
        self.assertEqual(var, Variable(size=22, code="sp", data=b"VLT creator v0.0.7"))
        self.assertFalse(var.is_end)

    def test_empty_data(self):
        var = parse_variable(serialize_variable("xx", b""))
        self.assertEqual((var.size, var.code, var.data), (4, "xx", b""))

    def test_sentinels(self):
        self.assertTrue(parse_variable(b"").is_end)
        self.assertTrue(parse_variable(b"\x05\x00m").is_end)
        self.assertTrue(parse_variable(b"\x00\x00\x00\x00").is_end)

    def test_truncated(self):
        raw = serialize_variable("mf", b"abcdef")
        with self.assertRaises(TruncatedRecord):
            parse_variable(raw[:-1])

    def test_size_smaller_than_header(self):
        with self.assertRaises(BadRecordSize):
            parse_variable(b"\x02\x00mfxx")
        with self.assertRaises(TruncatedRecord):
            decode_variable_block(b"\x02\x00mfxx")
        with self.assertRaises(TruncatedRecord):
            decode_variable_block(b"\x01\x00mf")

    def test_code_length(self):
        for bad in ("m", "mfx", b"", b"abc", "€€"):
            with self.subTest(code=bad):
                with self.assertRaises(InvalidCodeLength):
                    serialize_variable(bad, b"")
        self.assertEqual(normalize_code(b"\xffa"), "\xffa")

    def test_data_limit(self):
        serialize_variable("mf", b"x" * 0xFFFB)
        with self.assertRaises(DataTooLarge):
            serialize_variable("mf", b"x" * 0xFFFC)


class VariableBlockTests(unittest.TestCase):
    def test_encode_pads_to_four(self):
        block = encode_variable_block({"mf": b"deadbeefcafe.wav", "sp": b"VLT creator v0.0.7"})
        self.assertEqual(len(block), 44)
        self.assertEqual(block[-2:], b"\x00\x00")
        self.assertEqual(encode_variable_block({}), b"")

    def test_encode_preserves_order(self):
        block = encode_variable_block({"zz": b"1", "aa": b"2"})
        self.assertEqual(block[2:4], b"zz")
        self.assertEqual(block[7:9], b"aa")

    def test_decode_stops_at_padding(self):
        block = encode_variable_block({"mf": b"song.wav", "sp": b"abc"})
        self.assertEqual(decode_variable_block(block), {"mf": b"song.wav", "sp": b"abc"})
        self.assertEqual(decode_variable_block(block + b"\x00" * 8), {"mf": b"song.wav", "sp": b"abc"})
        self.assertEqual(decode_variable_block(b""), {})

    def test_decode_duplicate_last_wins(self):
        block = serialize_variable("mf", b"first") + serialize_variable("mf", b"second")
        self.assertEqual(decode_variable_block(block), {"mf": b"second"})

    def test_decode_truncated(self):
        block = serialize_variable("mf", b"song.wav")
        with self.assertRaises(TruncatedRecord):
            decode_variable_block(block[:-2])

    def test_block_overflow(self):
        with self.assertRaises(DocumentTooLarge):
            encode_variable_block({"aa": b"x" * 0xFFFB})
        with self.assertRaises(DataTooLarge):
            encode_variable_block({"aa": b"x" * 40000, "bb": b"x" * 40000})

    def test_padded_length(self):
        self.assertEqual([padded_length(n) for n in range(9)], [0, 4, 4, 4, 4, 8, 8, 8, 8])


if __name__ == "__main__":
    unittest.main()
