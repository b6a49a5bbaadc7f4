"""The ledger's base-32 alphabet used in account addresses.

This is not RFC 4648: the 32-character alphabet drops visually ambiguous
characters (``0``, ``2``, ``l``, ``v``) and maps each character to a 5-bit
value, most significant bit first. Public keys are encoded as 260 bits
(52 characters) and address checksums as 40 bits (8 characters).
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from nano_sdk.encoding import bytes_to_binary_string

ALPHABET = "13456789abcdefghijkmnopqrstuwxyz"

#: Bit width of a decoded public-key segment: 52 characters x 5 bits, plus
#: four leading zero bits so that the result is byte aligned.
DECODED_BIT_LENGTH = 264


class NanoBase32:
    """Immutable forward/reverse lookup tables for :data:`ALPHABET`.

    Tables are built once in ``__init__`` and exposed read-only, so a
    single instance can be shared across threads without locking.
    """

    __slots__ = ("_char_for_bits", "_bits_for_char")

    def __init__(self, alphabet: str = ALPHABET) -> None:
        if len(alphabet) != 32 or len(set(alphabet)) != 32:
            raise ValueError("alphabet must contain 32 distinct characters")
        groups = [f"{i:05b}" for i in range(32)]
        self._char_for_bits: Mapping[str, str] = MappingProxyType(dict(zip(groups, alphabet)))
        self._bits_for_char: Mapping[str, str] = MappingProxyType(dict(zip(alphabet, groups)))

    def encode(self, data: bytes, bit_length: int) -> str | None:
        """Encode *data* as base-32 characters.

        *data* is rendered as a bit string left-padded to *bit_length* bits
        and consumed five bits at a time.

        Returns:
            The encoded string, or ``None`` if a group has no character
            (a trailing group shorter than five bits, for instance).
        """
        bits = bytes_to_binary_string(data, bit_length)
        chars: list[str] = []
        for i in range(0, len(bits), 5):
            char = self._char_for_bits.get(bits[i : i + 5])
            if char is None:
                return None
            chars.append(char)
        return "".join(chars)

    def decode(self, text: str) -> str | None:
        """Decode base-32 characters into a bit string.

        The result is left-padded with zero bits to
        :data:`DECODED_BIT_LENGTH` bits.

        Returns:
            The bit string, or ``None`` if *text* contains a character
            outside the alphabet.
        """
        groups: list[str] = []
        for char in text:
            bits = self._bits_for_char.get(char)
            if bits is None:
                return None
            groups.append(bits)
        return "".join(groups).rjust(DECODED_BIT_LENGTH, "0")


#: Shared codec instance.
BASE32 = NanoBase32()
