"""Fixed-width base32 codec for TypeID suffixes.

Transcodes exactly 16 bytes to 26 characters and back, using the
alphabet ``0123456789abcdefghjkmnpqrstvwxyz`` (digits, then lowercase
letters without ``i``, ``l``, ``o`` and ``u``).  The alphabet is
case-sensitive: uppercase input is rejected.

The 26 characters carry 130 bits, so the first character only ever
holds the top 3 bits of the first byte.  Rejecting first characters
above ``7`` is the caller's job; see ``typeids.core.typeid``.

Usage::

    from typeids.core import base32

    text = base32.encode(bytes(16))   # "00000000000000000000000000"
    data = base32.decode(text)        # b"\\x00" * 16
"""

from __future__ import annotations

from .errors import InvalidCharacter, InvalidLength

ALPHABET = "0123456789abcdefghjkmnpqrstvwxyz"

DECODED_LENGTH = 16
ENCODED_LENGTH = 26

_INVALID = 0xFF


def _build_decode_table() -> tuple[int, ...]:
    table = [_INVALID] * 256
    for index, char in enumerate(ALPHABET):
        table[ord(char)] = index
    return tuple(table)


# 256-entry lookup: byte value -> alphabet index, or 0xFF for invalid.
DECODE_TABLE = _build_decode_table()


def encode(data: bytes) -> str:
    """Encode 16 bytes into a 26-character string.

    Raises:
        InvalidLength: if ``data`` is not exactly 16 bytes.
    """
    if len(data) != DECODED_LENGTH:
        raise InvalidLength(
            f"base32 encode expects {DECODED_LENGTH} bytes, got {len(data)}"
        )
    s = data
    a = ALPHABET
    return "".join(
        (
            a[(s[0] & 0b11100000) >> 5],
            a[s[0] & 0b00011111],
            a[(s[1] & 0b11111000) >> 3],
            a[((s[1] & 0b00000111) << 2) | ((s[2] & 0b11000000) >> 6)],
            a[(s[2] & 0b00111110) >> 1],
            a[((s[2] & 0b00000001) << 4) | ((s[3] & 0b11110000) >> 4)],
            a[((s[3] & 0b00001111) << 1) | ((s[4] & 0b10000000) >> 7)],
            a[(s[4] & 0b01111100) >> 2],
            a[((s[4] & 0b00000011) << 3) | ((s[5] & 0b11100000) >> 5)],
            a[s[5] & 0b00011111],
            # 10 bytes of entropy
            a[(s[6] & 0b11111000) >> 3],
            a[((s[6] & 0b00000111) << 2) | ((s[7] & 0b11000000) >> 6)],
            a[(s[7] & 0b00111110) >> 1],
            a[((s[7] & 0b00000001) << 4) | ((s[8] & 0b11110000) >> 4)],
            a[((s[8] & 0b00001111) << 1) | ((s[9] & 0b10000000) >> 7)],
            a[(s[9] & 0b01111100) >> 2],
            a[((s[9] & 0b00000011) << 3) | ((s[10] & 0b11100000) >> 5)],
            a[s[10] & 0b00011111],
            a[(s[11] & 0b11111000) >> 3],
            a[((s[11] & 0b00000111) << 2) | ((s[12] & 0b11000000) >> 6)],
            a[(s[12] & 0b00111110) >> 1],
            a[((s[12] & 0b00000001) << 4) | ((s[13] & 0b11110000) >> 4)],
            a[((s[13] & 0b00001111) << 1) | ((s[14] & 0b10000000) >> 7)],
            a[(s[14] & 0b01111100) >> 2],
            a[((s[14] & 0b00000011) << 3) | ((s[15] & 0b11100000) >> 5)],
            a[s[15] & 0b00011111],
        )
    )


def _indexes(text: str) -> list[int]:
    """Map each character to its alphabet index, rejecting strangers."""
    out = []
    for position, char in enumerate(text):
        code = ord(char)
        value = DECODE_TABLE[code] if code < 256 else _INVALID
        if value == _INVALID:
            raise InvalidCharacter(
                f"invalid base32 character {char!r} at position {position}",
                position=position,
            )
        out.append(value)
    return out


def decode(text: str) -> bytes:
    """Decode a 26-character string back into 16 bytes.

    Raises:
        InvalidLength: if ``text`` is not exactly 26 characters.
        InvalidCharacter: if any character is outside the alphabet.
    """
    if len(text) != ENCODED_LENGTH:
        raise InvalidLength(
            f"base32 decode expects {ENCODED_LENGTH} characters, got {len(text)}"
        )
    v = _indexes(text)
    return bytes(
        (
            # 6 bytes timestamp (48 bits)
            ((v[0] << 5) | v[1]) & 0xFF,
            ((v[2] << 3) | (v[3] >> 2)) & 0xFF,
            ((v[3] << 6) | (v[4] << 1) | (v[5] >> 4)) & 0xFF,
            ((v[5] << 4) | (v[6] >> 1)) & 0xFF,
            ((v[6] << 7) | (v[7] << 2) | (v[8] >> 3)) & 0xFF,
            ((v[8] << 5) | v[9]) & 0xFF,
            # 10 bytes of entropy (80 bits)
            ((v[10] << 3) | (v[11] >> 2)) & 0xFF,
            ((v[11] << 6) | (v[12] << 1) | (v[13] >> 4)) & 0xFF,
            ((v[13] << 4) | (v[14] >> 1)) & 0xFF,
            ((v[14] << 7) | (v[15] << 2) | (v[16] >> 3)) & 0xFF,
            ((v[16] << 5) | v[17]) & 0xFF,
            ((v[18] << 3) | (v[19] >> 2)) & 0xFF,
            ((v[19] << 6) | (v[20] << 1) | (v[21] >> 4)) & 0xFF,
            ((v[21] << 4) | (v[22] >> 1)) & 0xFF,
            ((v[22] << 7) | (v[23] << 2) | (v[24] >> 3)) & 0xFF,
            ((v[24] << 5) | v[25]) & 0xFF,
        )
    )
