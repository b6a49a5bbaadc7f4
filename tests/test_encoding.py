"""Tests for nano_sdk.encoding: hex, bit-string and fixed-width helpers."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from nano_sdk.encoding import (
    binary_string_to_bytes,
    bytes_to_binary_string,
    bytes_to_hex,
    hex_to_bytes,
    pad_left,
    u32_to_bytes,
)

_HEX = "780AC2195BC676FFD653C9F99FE641C9BB45B6E077CFAC5B6161461AC9C981AA"
_BYTES = bytes(
    [120, 10, 194, 25, 91, 198, 118, 255, 214, 83, 201, 249, 159, 230, 65, 201,
     187, 69, 182, 224, 119, 207, 172, 91, 97, 97, 70, 26, 201, 201, 129, 170]
)


class TestHex:
    """Hex string conversion."""

    def test_hex_to_bytes(self) -> None:
        assert hex_to_bytes(_HEX) == _BYTES

    def test_bytes_to_hex_is_uppercase(self) -> None:
        assert bytes_to_hex(_BYTES) == _HEX

    def test_lowercase_accepted(self) -> None:
        assert hex_to_bytes(_HEX.lower()) == _BYTES

    def test_empty(self) -> None:
        assert hex_to_bytes("") == b""
        assert bytes_to_hex(b"") == ""

    def test_odd_length_is_rejected(self) -> None:
        assert hex_to_bytes("ABC") is None

    def test_non_hex_digit_is_rejected(self) -> None:
        assert hex_to_bytes("ZZ") is None
        assert hex_to_bytes("0g") is None

    def test_non_ascii_is_rejected(self) -> None:
        assert hex_to_bytes("é0") is None

    @given(st.binary())
    def test_roundtrip(self, data: bytes) -> None:
        assert hex_to_bytes(bytes_to_hex(data)) == data


class TestBinaryString:
    """Bit string conversion."""

    def test_binary_to_bytes(self) -> None:
        assert binary_string_to_bytes("011001101110000100100100") == bytes([102, 225, 36])

    def test_bytes_to_binary_exact_length(self) -> None:
        assert bytes_to_binary_string(bytes([102, 225, 36]), 24) == "011001101110000100100100"

    def test_bytes_to_binary_padded(self) -> None:
        assert (
            bytes_to_binary_string(bytes([102, 225, 36]), 30)
            == "000000011001101110000100100100"
        )

    def test_shorter_min_length_does_not_truncate(self) -> None:
        assert bytes_to_binary_string(b"\xff", 4) == "11111111"

    def test_trailing_partial_chunk(self) -> None:
        # "101" is read as a 3-bit value, not shifted into the high bits.
        assert binary_string_to_bytes("11111111" + "101") == bytes([255, 5])

    def test_invalid_digit_raises(self) -> None:
        with pytest.raises(ValueError):
            binary_string_to_bytes("0102")

    @given(st.binary(min_size=32, max_size=32))
    def test_roundtrip_32_bytes(self, data: bytes) -> None:
        assert binary_string_to_bytes(bytes_to_binary_string(data, 256)) == data


class TestFixedWidth:
    """Big-endian padding and integer encoding."""

    def test_pad_left(self) -> None:
        assert pad_left(bytes([8, 8, 8]), 6) == bytes([0, 0, 0, 8, 8, 8])

    def test_pad_left_never_truncates(self) -> None:
        data = bytes(range(10))
        assert pad_left(data, 4) == data

    @given(st.binary(max_size=40), st.integers(min_value=0, max_value=48))
    def test_pad_left_is_idempotent(self, data: bytes, length: int) -> None:
        once = pad_left(data, length)
        assert pad_left(once, length) == once
        assert len(once) == max(len(data), length)

    def test_u32_to_bytes(self) -> None:
        assert u32_to_bytes(1234) == bytes([0, 0, 4, 210])

    def test_u32_bounds(self) -> None:
        assert u32_to_bytes(0) == b"\x00\x00\x00\x00"
        assert u32_to_bytes(2**32 - 1) == b"\xff\xff\xff\xff"

    @pytest.mark.parametrize("value", [-1, 2**32])
    def test_u32_out_of_range_raises(self, value: int) -> None:
        with pytest.raises(ValueError, match="32-bit"):
            u32_to_bytes(value)
