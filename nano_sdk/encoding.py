"""Lossless conversions between raw bytes, hex strings and bit strings.

Every fixed-width field in the ledger protocol is big-endian, so padding
always adds zero bytes (or zero bits) at the *front* of a value.
"""

from __future__ import annotations

import binascii
import struct

_U32_MAX = 0xFFFFFFFF


def bytes_to_hex(data: bytes) -> str:
    """Render *data* as uppercase hex, two digits per byte."""
    return data.hex().upper()


def hex_to_bytes(text: str) -> bytes | None:
    """Decode a hex string (either case) into bytes.

    Returns:
        The decoded bytes, or ``None`` when *text* has an odd length or
        contains a non-hex character.
    """
    if len(text) % 2:
        return None
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError):
        return None


def bytes_to_binary_string(data: bytes, min_length: int = 0) -> str:
    """Render each byte as eight binary digits, left-padded to *min_length*.

    Padding is a no-op when the rendering is already at least *min_length*
    digits long.
    """
    bits = "".join(f"{byte:08b}" for byte in data)
    return bits.rjust(min_length, "0")


def binary_string_to_bytes(bits: str) -> bytes:
    """Parse a string of ``0``/``1`` digits in 8-digit chunks from the left.

    A trailing chunk shorter than eight digits is parsed as-is, i.e. it
    contributes a byte with fewer significant bits.

    Raises:
        ValueError: If *bits* contains anything other than ``0`` or ``1``.
    """
    return bytes(int(bits[i : i + 8], 2) for i in range(0, len(bits), 8))


def pad_left(data: bytes, length: int) -> bytes:
    """Prepend zero bytes until *data* is *length* bytes long. Never truncates."""
    if len(data) >= length:
        return data
    return bytes(length - len(data)) + data


def u32_to_bytes(value: int) -> bytes:
    """Encode *value* as a 4-byte big-endian unsigned integer.

    Raises:
        ValueError: If *value* is outside ``0 .. 2**32 - 1``.
    """
    if not 0 <= value <= _U32_MAX:
        raise ValueError(f"index must fit in an unsigned 32-bit integer, got {value}")
    return struct.pack(">I", value)
