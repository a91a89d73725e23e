"""Codepoint classification for diacritic removal.

Only two Latin ranges are candidates for diacritic removal: Latin-1
Supplement through Latin Extended-A, and the accented part of Latin
Extended-B. Both contain a handful of letters and symbols that carry no
diacritic and are excluded explicitly.
"""

from typing import FrozenSet, List, Tuple

# Inclusive ranges of accented Latin letters
DIACRITIC_RANGES: List[Tuple[int, int]] = [
    (0x00C0, 0x017E),  # Latin-1 Supplement letters through Latin Extended-A
    (0x01CD, 0x024F),  # Latin Extended-B from the pinyin vowels onward
]

# Letters and symbols inside the ranges without a removable diacritic
DIACRITIC_EXCLUSIONS: FrozenSet[int] = frozenset({
    # Eth, multiplication sign, eth, division sign, kra, eng, eng
    0x00D0, 0x00D7, 0x00F0, 0x00F7, 0x0138, 0x014A, 0x014B,
    # Turned e, wynn, yogh, yogh, n with long right leg, d with curl,
    # glottal stops, turned v
    0x01DD, 0x01F7, 0x021C, 0x021D, 0x0220, 0x0221, 0x0241, 0x0242, 0x0245,
})

# Substituted for malformed units when the original text is kept
REPLACEMENT_CHARACTER = "\uFFFD"


def is_diacritic_candidate(codepoint: int) -> bool:
    """Check if a codepoint is an accented Latin letter.

    Args:
        codepoint: Unicode code point

    Returns:
        True if the codepoint lies in a diacritic range and is not excluded
    """
    if codepoint in DIACRITIC_EXCLUSIONS:
        return False
    return any(start <= codepoint <= end for start, end in DIACRITIC_RANGES)
