"""Tolerant UTF-8 decoding into source units with never-fail guarantee.

This module splits a byte buffer into source units, one per leading byte.
Sequence lengths follow the historical UTF-8 length-prefix scheme (1 to 6
bytes), so a legacy 5- or 6-byte leading byte still consumes the bytes it
claims and produces exactly one invalid unit instead of one per raw byte.

Value checks are stricter than the length prefix alone. A complete sequence
that is not the shortest encoding of a Unicode scalar value, for example the
overlong C1 81 for "A", decodes to INVALID rather than to the codepoint its
bits spell.
"""

from dataclasses import dataclass
from typing import ClassVar, Dict, Iterator, List, Union

# UTF-8 leading byte boundaries
ASCII_MAX = 0x80
UTF8_CONTINUATION_MIN = 0x80
UTF8_CONTINUATION_MAX = 0xC0
UTF8_2BYTE_MAX = 0xE0
UTF8_3BYTE_MAX = 0xF0
UTF8_4BYTE_MAX = 0xF8
LEGACY_5BYTE_MAX = 0xFC
LEGACY_6BYTE_MAX = 0xFE

# Longest sequence that can still encode a real codepoint
MAX_MODERN_SEQUENCE = 4

CONTINUATION_PAYLOAD_MASK = 0x3F
CONTINUATION_PAYLOAD_BITS = 6

# Codepoint limits
SURROGATE_RANGE_START = 0xD800
SURROGATE_RANGE_END = 0xDFFF
MAX_CODEPOINT = 0x10FFFF

# Sentinel codepoint for malformed sequences
INVALID = -1

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class SourceUnit:
    """One decoded character of the input, valid or not.

    Attributes:
        codepoint: Decoded codepoint, or INVALID for a malformed sequence
        byte_length: Number of input bytes consumed by this unit
    """
    codepoint: int
    byte_length: int

    def __post_init__(self) -> None:
        """Validate byte length."""
        if self.byte_length < 1:
            raise ValueError(
                f"byte_length must be >= 1, got {self.byte_length}"
            )

    @property
    def is_valid(self) -> bool:
        """Whether the unit decoded to a codepoint."""
        return self.codepoint != INVALID

    @property
    def is_ascii(self) -> bool:
        """Whether the unit is a plain ASCII character."""
        return 0 <= self.codepoint < ASCII_MAX


class CodepointDecoder:
    """Single-pass decoder producing SourceUnits from UTF-8 bytes.

    The decoder keeps no state between calls, so one instance can be shared
    freely across threads.
    """

    # Payload bits kept from the leading byte, per sequence length
    LEAD_PAYLOAD_MASKS: ClassVar[Dict[int, int]] = {
        2: 0x1F,
        3: 0x0F,
        4: 0x07,
    }

    # Smallest codepoint each sequence length may encode (overlong below)
    MIN_CODEPOINTS: ClassVar[Dict[int, int]] = {
        2: 0x80,
        3: 0x800,
        4: 0x10000,
    }

    @staticmethod
    def sequence_length(lead_byte: int) -> int:
        """Number of bytes a leading byte claims.

        Args:
            lead_byte: First byte of the sequence

        Returns:
            Claimed sequence length from 1 to 6
        """
        if lead_byte < ASCII_MAX:
            return 1
        if lead_byte < UTF8_CONTINUATION_MAX:
            # Stray continuation byte
            return 1
        if lead_byte < UTF8_2BYTE_MAX:
            return 2
        if lead_byte < UTF8_3BYTE_MAX:
            return 3
        if lead_byte < UTF8_4BYTE_MAX:
            return 4
        if lead_byte < LEGACY_5BYTE_MAX:
            return 5
        if lead_byte < LEGACY_6BYTE_MAX:
            return 6
        # 0xFE and 0xFF never start a sequence
        return 1

    def decode(self, data: BytesLike) -> Iterator[SourceUnit]:
        """Decode bytes into source units.

        Args:
            data: UTF-8 encoded bytes, possibly malformed

        Yields:
            SourceUnit for every leading byte, covering the whole input
        """
        buffer = bytes(data)
        total = len(buffer)
        position = 0

        while position < total:
            claimed = self.sequence_length(buffer[position])
            length = min(claimed, total - position)
            if length < claimed:
                codepoint = INVALID
            else:
                codepoint = self._decode_sequence(buffer, position, length)
            yield SourceUnit(codepoint, length)
            position += length

    def decode_all(self, data: BytesLike) -> List[SourceUnit]:
        """Decode bytes into a list of source units."""
        return list(self.decode(data))

    def _decode_sequence(self, buffer: bytes, start: int, length: int) -> int:
        """Decode a complete sequence of the claimed length.

        Returns:
            The codepoint, or INVALID if the sequence is malformed.
        """
        lead_byte = buffer[start]

        if lead_byte < ASCII_MAX:
            return lead_byte
        if length == 1 or length > MAX_MODERN_SEQUENCE:
            return INVALID

        codepoint = lead_byte & self.LEAD_PAYLOAD_MASKS[length]
        for offset in range(1, length):
            byte = buffer[start + offset]
            if not UTF8_CONTINUATION_MIN <= byte < UTF8_CONTINUATION_MAX:
                return INVALID
            codepoint = (codepoint << CONTINUATION_PAYLOAD_BITS) | (
                byte & CONTINUATION_PAYLOAD_MASK
            )

        if codepoint < self.MIN_CODEPOINTS[length]:
            return INVALID
        if SURROGATE_RANGE_START <= codepoint <= SURROGATE_RANGE_END:
            return INVALID
        if codepoint > MAX_CODEPOINT:
            return INVALID
        return codepoint


def decode(data: BytesLike) -> Iterator[SourceUnit]:
    """Decode bytes into source units with a fresh decoder."""
    return CodepointDecoder().decode(data)
