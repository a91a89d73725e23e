"""Tests for tolerant UTF-8 decoding into source units."""

import pytest

from ultra_robust_transliterator.character.decoder import (
    INVALID,
    CodepointDecoder,
    SourceUnit,
    decode,
)


def units(data: bytes):
    return [(u.codepoint, u.byte_length) for u in CodepointDecoder().decode(data)]


class TestSourceUnit:
    """Test SourceUnit data class."""

    def test_valid_unit(self):
        """Test properties of a decoded unit."""
        unit = SourceUnit(0xC4, 2)
        assert unit.is_valid
        assert not unit.is_ascii

    def test_invalid_unit(self):
        """Test properties of a malformed unit."""
        unit = SourceUnit(INVALID, 5)
        assert not unit.is_valid
        assert not unit.is_ascii

    def test_ascii_unit(self):
        """Test ASCII classification."""
        assert SourceUnit(ord("a"), 1).is_ascii

    def test_zero_byte_length_rejected(self):
        """Test that every unit consumes at least one byte."""
        with pytest.raises(ValueError, match="byte_length"):
            SourceUnit(ord("a"), 0)

    def test_immutable(self):
        """Test that units are frozen."""
        unit = SourceUnit(ord("a"), 1)
        with pytest.raises(AttributeError):
            unit.codepoint = ord("b")


class TestSequenceLength:
    """Test leading byte classification."""

    @pytest.mark.parametrize("lead_byte,expected", [
        (0x00, 1),
        (0x7F, 1),
        (0x80, 1),
        (0xBF, 1),
        (0xC2, 2),
        (0xDF, 2),
        (0xE0, 3),
        (0xEF, 3),
        (0xF0, 4),
        (0xF7, 4),
        (0xF8, 5),
        (0xFB, 5),
        (0xFC, 6),
        (0xFD, 6),
        (0xFE, 1),
        (0xFF, 1),
    ])
    def test_claimed_lengths(self, lead_byte, expected):
        """Test claimed sequence length for each leading byte class."""
        assert CodepointDecoder.sequence_length(lead_byte) == expected


class TestCodepointDecoder:
    """Test CodepointDecoder decoding behavior."""

    def test_empty_input(self):
        """Test that empty input yields no units."""
        assert units(b"") == []

    def test_ascii(self):
        """Test that ASCII bytes decode to themselves."""
        assert units(b"hi") == [(ord("h"), 1), (ord("i"), 1)]

    def test_multibyte_sequences(self):
        """Test 2, 3 and 4 byte sequences."""
        data = "Äᐑ𐌰".encode("utf-8")
        assert units(data) == [(0xC4, 2), (0x1411, 3), (0x10330, 4)]

    def test_legacy_five_byte_sequence_is_one_unit(self):
        """Test that a 5-byte legacy sequence is consumed as one invalid unit."""
        assert units(bytes([0xF8, 0x80, 0x80, 0x80, 0x80])) == [(INVALID, 5)]

    def test_legacy_six_byte_sequence_is_one_unit(self):
        """Test that a 6-byte legacy sequence is consumed as one invalid unit."""
        data = bytes([0xFC, 0x80, 0x80, 0x80, 0x80, 0x80]) + b"a"
        assert units(data) == [(INVALID, 6), (ord("a"), 1)]

    def test_stray_continuation_bytes(self):
        """Test that each stray continuation byte is its own invalid unit."""
        assert units(bytes([0x80, 0xBF])) == [(INVALID, 1), (INVALID, 1)]

    @pytest.mark.parametrize("byte", [0xFE, 0xFF])
    def test_never_leading_bytes(self, byte):
        """Test bytes that never start a sequence."""
        assert units(bytes([byte, 0x41])) == [(INVALID, 1), (0x41, 1)]

    def test_truncated_sequence_at_end(self):
        """Test that a truncated sequence consumes the remaining bytes."""
        assert units(b"a" + bytes([0xE2, 0x82])) == [(ord("a"), 1), (INVALID, 2)]

    def test_bad_continuation_consumes_claimed_length(self):
        """Test that a sequence with a non-continuation byte stays one unit."""
        assert units(bytes([0xC3, 0x41, 0x42])) == [(INVALID, 2), (0x42, 1)]

    @pytest.mark.parametrize("data", [
        bytes([0xC0, 0x80]),              # overlong NUL
        bytes([0xC1, 0x81]),              # overlong 'A'
        bytes([0xE0, 0x80, 0xAF]),        # overlong '/'
        bytes([0xF0, 0x80, 0x80, 0xAF]),  # overlong '/'
    ])
    def test_overlong_sequences_are_invalid(self, data):
        """Test that overlong encodings are rejected."""
        assert units(data) == [(INVALID, len(data))]

    def test_surrogate_is_invalid(self):
        """Test that encoded surrogates are rejected."""
        assert units(bytes([0xED, 0xA0, 0x80])) == [(INVALID, 3)]

    def test_codepoint_above_unicode_range_is_invalid(self):
        """Test that four byte sequences beyond U+10FFFF are rejected."""
        assert units(bytes([0xF4, 0x90, 0x80, 0x80])) == [(INVALID, 4)]

    def test_byte_lengths_cover_input(self):
        """Test that unit byte lengths always sum to the input length."""
        data = bytes([0xF8, 0x80, 0x41, 0xC3, 0xFF, 0xE2, 0x82, 0xAC, 0xF0, 0x9F])
        decoded = CodepointDecoder().decode_all(data)
        assert sum(u.byte_length for u in decoded) == len(data)
        assert all(u.byte_length >= 1 for u in decoded)

    def test_accepts_bytes_like(self):
        """Test bytearray and memoryview input."""
        data = "ä".encode("utf-8")
        assert units(bytearray(data)) == [(0xE4, 2)]
        assert units(memoryview(data)) == [(0xE4, 2)]

    def test_decode_is_lazy(self):
        """Test that decoding yields units one by one."""
        iterator = CodepointDecoder().decode(b"ab")
        assert next(iterator) == SourceUnit(ord("a"), 1)

    def test_module_level_decode(self):
        """Test the module-level decode helper."""
        assert list(decode(b"a")) == [SourceUnit(ord("a"), 1)]
