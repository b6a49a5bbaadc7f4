"""Tests for nano_sdk.identity: key derivation, address encoding, validation."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from nano_sdk.account import NanoAccount, new_account
from nano_sdk.encoding import hex_to_bytes
from nano_sdk.identity import (
    DECODED_KEY_OFFSET,
    check_address,
    create_address,
    create_checksum,
    decode_public_key,
    derive_private_key,
    derive_public_key,
    encode_public_key,
    generate_seed,
    is_valid_address,
    parse_address,
    seed_from_message,
    sign_message,
    split_address,
    verify_signature,
)
from nano_sdk.types import AccountPrefix, AddressCheckResult


def _h(text: str) -> bytes:
    data = hex_to_bytes(text)
    assert data is not None
    return data


_VALID_XRB = "xrb_1y1craeoqjmpzzd79khsmzm65kfuapug1xyhojfp4rc85d6wm1fcgkcqx8e8"
_VALID_NANO = "nano_1hdda1zcipzftncz155ughx5xzyunsjxygbyc6yqjqoz9emmanzc8qybmubs"
_VALID_BAN = "ban_3aijypbpn8zqzbzi8kie6foi4549put5s7du7y8emz1n1tz91aptck7qkkcd"


class TestSeeds:
    def test_generate_seed_length(self) -> None:
        assert len(generate_seed()) == 32

    def test_generate_seed_unique(self) -> None:
        assert generate_seed() != generate_seed()

    def test_seed_from_message_is_blake2b(self) -> None:
        import hashlib

        assert seed_from_message("hello") == hashlib.blake2b(b"hello", digest_size=32).digest()


class TestPrivateKeyDerivation:
    """Seed + index -> private key."""

    _SEED = _h("AF30153E697BCF976236C68995774AA0797B8D67E46DDC15E1694317DA03BF84")

    def test_index_0(self) -> None:
        assert derive_private_key(self._SEED, 0) == _h(
            "4B1BA284ABB8CD984747E4842BC516CD98EF5266DF71D4FD794DA1A91F49CAB1"
        )

    def test_index_10(self) -> None:
        assert derive_private_key(self._SEED, 10) == _h(
            "1181391DC2548DFC41205008D7C1B118D7AC3452CD29A68D2732E6B5BA3802A6"
        )

    def test_deterministic(self) -> None:
        assert derive_private_key(self._SEED, 7) == derive_private_key(self._SEED, 7)

    def test_indexes_differ(self) -> None:
        assert derive_private_key(self._SEED, 0) != derive_private_key(self._SEED, 1)

    def test_invalid_seed_length_raises(self) -> None:
        with pytest.raises(ValueError, match="32 bytes"):
            derive_private_key(b"\x00" * 16, 0)

    def test_index_out_of_range_raises(self) -> None:
        with pytest.raises(ValueError):
            derive_private_key(self._SEED, 2**32)


class TestPublicKeyDerivation:
    def test_published_vector(self) -> None:
        private_key = _h("28C5154368F447EADD9B34C76A5F69BBE2BB90DFA0ECC73A0DD66191129A697F")
        assert derive_public_key(private_key) == _h(
            "2D9219FFED9553B7D526C70232CCB2AF7E2D566BFE119B0F23ECE2439B28867D"
        )

    def test_invalid_length_raises(self) -> None:
        with pytest.raises(ValueError, match="32 bytes"):
            derive_public_key(b"\x00" * 64)


class TestAddressEncoding:
    def test_encode_public_key(self) -> None:
        public_key = _h("F784127048B8744F7BA620BC16D9CEC73C2AFE54D34931E467D6A5AAB1380798")
        assert encode_public_key(public_key) == "3xw64br6jg5nbxxtea7w4uewxjsw7dz7bntb89k8hoo7ocrmi3wr"

    def test_decode_public_key(self) -> None:
        assert decode_public_key("3xw64br6jg5nbxxtea7w4uewxjsw7dz7bntb89k8hoo7ocrmi3wr") == _h(
            "F784127048B8744F7BA620BC16D9CEC73C2AFE54D34931E467D6A5AAB1380798"
        )

    def test_decoded_key_offset_is_one_byte(self) -> None:
        assert DECODED_KEY_OFFSET == 1

    def test_decode_rejects_wrong_length(self) -> None:
        assert decode_public_key("3xw64br6jg5nbxxtea7w4uewxjsw7dz7bntb89k8hoo7ocrmi3w") is None
        assert decode_public_key("") is None

    def test_decode_rejects_overflow(self) -> None:
        # A leading "9" sets bits above the 256-bit key.
        assert decode_public_key("9" + "1" * 51) is None

    def test_decode_rejects_bad_character(self) -> None:
        assert decode_public_key("3xw64br6jg5nbxxtea7w4uewxjsw7dz7bntb89k8hoo7ocrmi3w0") is None

    def test_create_checksum(self) -> None:
        public_key = _h("EBC82B26FAE2FBE14BAF303492C8CF6E66391EA8F641FE74A0B0D06CEF806703")
        assert create_checksum(public_key) == "czeejhht"

    def test_encode_rejects_wrong_length(self) -> None:
        with pytest.raises(ValueError, match="32 bytes"):
            encode_public_key(b"\x00" * 16)

    @given(st.binary(min_size=32, max_size=32))
    def test_roundtrip(self, public_key: bytes) -> None:
        encoded = encode_public_key(public_key)
        assert encoded is not None
        assert len(encoded) == 52
        assert encoded[0] in "13"
        assert decode_public_key(encoded) == public_key


class TestAccountCreation:
    """Full seed -> address vector."""

    _SEED = _h("489544D50CE37B138C740189AF688067D6506423E2798B67C5091D27ABB999DA")

    def test_new_account(self) -> None:
        account = new_account(self._SEED, 0)
        assert account.private_key == _h(
            "99E4D455A4ABE56933368C278C4A9EAB664BF0FA0C19B749BF8634206BEF3599"
        )
        assert account.public_key == _h(
            "EC08268C08F29C326880530E700EADDD2714BA77E139BE899B789F2C88471960"
        )
        assert account.encoded_public_key == "3u1a6t81jwnw8bna1nrgg19cuqb94kx9hrbsqt6spy6z7k66g8d1"
        assert account.checksum == "zyfoz1xw"
        assert account.address == (
            "nano_3u1a6t81jwnw8bna1nrgg19cuqb94kx9hrbsqt6spy6z7k66g8d1zyfoz1xw"
        )

    def test_create_address_prefixes(self) -> None:
        public_key = new_account(self._SEED, 0).public_key
        body = "3u1a6t81jwnw8bna1nrgg19cuqb94kx9hrbsqt6spy6z7k66g8d1zyfoz1xw"
        assert create_address(public_key) == "nano_" + body
        assert create_address(public_key, AccountPrefix.XRB) == "xrb_" + body
        assert create_address(public_key, "ban_") == "ban_" + body

    def test_create_address_unknown_prefix(self) -> None:
        with pytest.raises(ValueError):
            create_address(b"\x00" * 32, "btc_")

    def test_private_key_hidden_from_repr_and_dump(self) -> None:
        account = new_account(self._SEED, 0)
        assert account.private_key.hex() not in repr(account)
        assert "private_key" not in account.model_dump()


class TestSplitAddress:
    def test_split(self) -> None:
        prefix, encoded, checksum = split_address(_VALID_NANO)
        assert prefix is AccountPrefix.NANO
        assert encoded == "1hdda1zcipzftncz155ughx5xzyunsjxygbyc6yqjqoz9emmanzc"
        assert checksum == "8qybmubs"

    def test_split_legacy(self) -> None:
        prefix, encoded, checksum = split_address(_VALID_XRB)
        assert prefix is AccountPrefix.XRB
        assert len(encoded) == 52
        assert checksum == "gkcqx8e8"

    def test_unknown_prefix(self) -> None:
        assert split_address("btc_1y1craeoqjmpzzd79khsmzm65kfuapug1xyhojfp4rc85d6wm1fcgkcqx8e8") is None


class TestAddressValidation:
    """Published validation outcomes."""

    @pytest.mark.parametrize("address", [_VALID_XRB, _VALID_NANO, _VALID_BAN])
    def test_valid(self, address: str) -> None:
        assert check_address(address) is AddressCheckResult.VALID
        assert is_valid_address(address)

    def test_invalid_length(self) -> None:
        address = "ban_3aijypbpn8zqzbzi8kie6foi449put5s7du7y8emz1n1tz91aptck7qkkcd"
        assert check_address(address) is AddressCheckResult.INVALID_LENGTH

    def test_invalid_encoding(self) -> None:
        address = "nano_9hdda1zcipzftncz155ughx5xzyunsjxygbyc6yqjqoz9emmanzc8qybmubs"
        assert check_address(address) is AddressCheckResult.INVALID_ENCODING

    def test_invalid_prefix(self) -> None:
        address = "nanoo_1qpczp3hzxzz3wdgj8fu769zsosz1xwi6ona9fy8oi1ze8ik14qn5ef7rnra"
        assert check_address(address) is AddressCheckResult.INVALID_PREFIX

    def test_invalid_checksum(self) -> None:
        address = "xrb_1y1craeoqjmpzzd79khsmzm65kfuapug1xyhojfp4rc85d6wm1fcgkcqx8e9"
        assert check_address(address) is AddressCheckResult.INVALID_CHECKSUM

    def test_uppercase_is_other(self) -> None:
        assert check_address(_VALID_NANO.upper().replace("NANO_", "nano_")) is (
            AddressCheckResult.INVALID_OTHER
        )

    def test_character_outside_alphabet_in_shape(self) -> None:
        # "2" passes the shape check but is not part of the alphabet.
        address = _VALID_NANO[:10] + "2" + _VALID_NANO[11:]
        assert check_address(address) is AddressCheckResult.INVALID_ENCODING

    def test_trailing_newline_is_other(self) -> None:
        assert check_address(_VALID_NANO + "\n") is not AddressCheckResult.VALID

    @pytest.mark.parametrize("address", ["", "nano_", "nano_1", "xrb_" + "1" * 100, "\x00"])
    def test_never_raises(self, address: str) -> None:
        assert isinstance(check_address(address), AddressCheckResult)

    def test_non_string(self) -> None:
        assert check_address(None) is AddressCheckResult.INVALID_OTHER  # type: ignore[arg-type]


class TestParseAddress:
    def test_parse_roundtrip(self) -> None:
        public_key = parse_address(_VALID_NANO)
        assert create_address(public_key) == _VALID_NANO

    def test_prefix_is_cosmetic(self) -> None:
        body = _VALID_NANO[len("nano_") :]
        assert parse_address("xrb_" + body) == parse_address(_VALID_NANO)

    def test_invalid_raises_with_reason(self) -> None:
        with pytest.raises(ValueError, match="invalid_checksum"):
            parse_address(_VALID_XRB[:-1] + "9")


class TestSigning:
    def test_sign_derives_public_key(self) -> None:
        private_key = b"\x05" * 32
        public_key = derive_public_key(private_key)
        assert sign_message(b"m", private_key) == sign_message(b"m", private_key, public_key)

    def test_verify(self) -> None:
        private_key = b"\x06" * 32
        sig = sign_message(b"m", private_key)
        assert verify_signature(derive_public_key(private_key), b"m", sig) is True

    def test_bad_key_length_raises(self) -> None:
        with pytest.raises(ValueError, match="32 bytes"):
            sign_message(b"m", b"\x01" * 32, b"\x02" * 31)


class TestAccountGuards:
    def test_malformed_public_key_raises(self) -> None:
        account = NanoAccount(index=0, private_key=b"\x00" * 32, public_key=b"\x00" * 31)
        with pytest.raises(ValueError, match="32 bytes"):
            account.address
