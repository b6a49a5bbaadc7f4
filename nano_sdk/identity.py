"""Account identity primitives: key derivation, addresses and signatures.

Private keys are derived from a 32-byte seed and a 32-bit account index
with Blake2b. Public keys come from Ed25519 over Blake2b-512. An address
is a prefix, the public key in the ledger's base-32 alphabet (52
characters) and a checksum of the key (8 characters)::

    nano_3u1a6t81jwnw8bna1nrgg19cuqb94kx9hrbsqt6spy6z7k66g8d1zyfoz1xw
    |    |                                                   |
    prefix  encoded public key                               checksum

All functions are pure. Hashing and signing go through a
:class:`~nano_sdk.crypto.CryptoBackend`, the shared default unless one is
passed explicitly.
"""

from __future__ import annotations

import re

from nacl.utils import random as random_bytes

from nano_sdk.base32 import BASE32
from nano_sdk.crypto import DEFAULT_BACKEND, KEY_BYTES, CryptoBackend
from nano_sdk.encoding import binary_string_to_bytes, u32_to_bytes
from nano_sdk.types import AccountPrefix, AddressCheckResult

SEED_BYTES = 32

#: Characters in the encoded public key segment of an address.
ENCODED_KEY_LENGTH = 52
#: Characters in the checksum segment of an address.
CHECKSUM_LENGTH = 8

#: Bits used to encode a public key (52 characters x 5 bits).
PUBLIC_KEY_BITS = 260
#: Bits used to encode a checksum (8 characters x 5 bits).
CHECKSUM_BITS = 40
#: Checksum digest size in bytes.
CHECKSUM_BYTES = 5

#: A decoded 52-character segment is 33 bytes; the key follows one
#: leading byte that is always zero for a well-formed address.
DECODED_KEY_OFFSET = 1

_ADDRESS_RE = re.compile(r"(nano|xrb|ban)_[13][1-9a-km-z]{59}")


# ---------------------------------------------------------------------------
# Seeds and keys
# ---------------------------------------------------------------------------


def generate_seed() -> bytes:
    """Return 32 bytes of cryptographically secure random seed material."""
    return random_bytes(SEED_BYTES)


def seed_from_message(message: str, backend: CryptoBackend = DEFAULT_BACKEND) -> bytes:
    """Derive a seed from text as the 32-byte Blake2b hash of its UTF-8 bytes.

    Only as strong as the text; prefer :func:`generate_seed`.
    """
    return backend.keyed_hash(message.encode("utf-8"), SEED_BYTES)


def derive_private_key(
    seed: bytes, index: int, backend: CryptoBackend = DEFAULT_BACKEND
) -> bytes:
    """Derive the private key of account *index*: ``blake2b(seed || index)``.

    Args:
        seed: Exactly 32 bytes of seed material.
        index: Account index, ``0 .. 2**32 - 1``, appended big-endian.

    Raises:
        ValueError: If *seed* is not 32 bytes or *index* is out of range.
    """
    if len(seed) != SEED_BYTES:
        raise ValueError(f"seed must be exactly {SEED_BYTES} bytes, got {len(seed)}")
    return backend.keyed_hash(seed + u32_to_bytes(index), KEY_BYTES)


def derive_public_key(private_key: bytes, backend: CryptoBackend = DEFAULT_BACKEND) -> bytes:
    """Derive the 32-byte public key for *private_key*.

    Raises:
        ValueError: If *private_key* is not 32 bytes.
    """
    if len(private_key) != KEY_BYTES:
        raise ValueError(f"private key must be exactly {KEY_BYTES} bytes, got {len(private_key)}")
    return backend.derive_public_key(private_key)


def sign_message(
    message: bytes,
    private_key: bytes,
    public_key: bytes | None = None,
    backend: CryptoBackend = DEFAULT_BACKEND,
) -> bytes:
    """Sign *message*, deriving the public key first when it is not given.

    Returns:
        The 64-byte signature.

    Raises:
        ValueError: If either key is not 32 bytes.
    """
    if public_key is None:
        public_key = derive_public_key(private_key, backend)
    if len(private_key) != KEY_BYTES or len(public_key) != KEY_BYTES:
        raise ValueError(f"keys must be exactly {KEY_BYTES} bytes")
    return backend.sign(private_key, public_key, message)


def verify_signature(
    public_key: bytes,
    message: bytes,
    signature: bytes,
    backend: CryptoBackend = DEFAULT_BACKEND,
) -> bool:
    """Verify a signature. Returns ``False`` for any malformed input."""
    verify = getattr(backend, "verify", None)
    if verify is None:
        raise TypeError(f"{type(backend).__name__} cannot verify signatures")
    return bool(verify(public_key, message, signature))


# ---------------------------------------------------------------------------
# Address encoding
# ---------------------------------------------------------------------------


def encode_public_key(public_key: bytes) -> str | None:
    """Encode a public key as the 52-character address segment."""
    if len(public_key) != KEY_BYTES:
        raise ValueError(f"public key must be exactly {KEY_BYTES} bytes, got {len(public_key)}")
    return BASE32.encode(public_key, PUBLIC_KEY_BITS)


def decode_public_key(encoded: str) -> bytes | None:
    """Recover the public key from a 52-character address segment.

    Returns:
        The 32-byte key, or ``None`` if *encoded* has the wrong length,
        contains a character outside the alphabet, or overflows 256 bits.
    """
    if len(encoded) != ENCODED_KEY_LENGTH:
        return None
    bits = BASE32.decode(encoded)
    if bits is None:
        return None
    decoded = binary_string_to_bytes(bits)
    if any(decoded[:DECODED_KEY_OFFSET]):
        return None
    return decoded[DECODED_KEY_OFFSET:]


def create_checksum(public_key: bytes, backend: CryptoBackend = DEFAULT_BACKEND) -> str | None:
    """Compute the 8-character checksum segment for *public_key*.

    The 5-byte Blake2b digest is byte-reversed before encoding.
    """
    digest = backend.keyed_hash(public_key, CHECKSUM_BYTES)
    return BASE32.encode(digest[::-1], CHECKSUM_BITS)


def create_address(
    public_key: bytes,
    prefix: AccountPrefix | str = AccountPrefix.NANO,
    backend: CryptoBackend = DEFAULT_BACKEND,
) -> str:
    """Build the full address for *public_key*.

    Raises:
        ValueError: If *public_key* is not 32 bytes or *prefix* is unknown.
    """
    prefix = AccountPrefix(prefix)
    encoded = encode_public_key(public_key)
    checksum = create_checksum(public_key, backend)
    if encoded is None or checksum is None:
        raise ValueError("public key could not be encoded")
    return prefix.value + encoded + checksum


def split_address(address: str) -> tuple[AccountPrefix, str, str] | None:
    """Split *address* into ``(prefix, encoded_public_key, checksum)``.

    The checksum is the last eight characters and the encoded key is
    whatever lies between the prefix and the checksum; lengths are not
    checked here.

    Returns:
        The three parts, or ``None`` if *address* has no recognised prefix.
    """
    for prefix in AccountPrefix:
        if address.startswith(prefix.value):
            body = address[len(prefix.value) :]
            return prefix, body[:-CHECKSUM_LENGTH], body[-CHECKSUM_LENGTH:]
    return None


def check_address(
    address: str, backend: CryptoBackend = DEFAULT_BACKEND
) -> AddressCheckResult:
    """Classify *address*. Never raises.

    Checks, in order: prefix, overall shape, base-32 decoding, checksum.
    When the shape is wrong, a bad first key character is reported as an
    encoding problem before a length mismatch is considered.
    """
    if not isinstance(address, str):
        return AddressCheckResult.INVALID_OTHER
    parts = split_address(address)
    if parts is None:
        return AddressCheckResult.INVALID_PREFIX
    _, encoded, checksum = parts

    if not _ADDRESS_RE.fullmatch(address):
        if encoded[:1] not in ("1", "3"):
            return AddressCheckResult.INVALID_ENCODING
        if len(encoded) + len(checksum) != ENCODED_KEY_LENGTH + CHECKSUM_LENGTH:
            return AddressCheckResult.INVALID_LENGTH
        return AddressCheckResult.INVALID_OTHER

    public_key = decode_public_key(encoded)
    if public_key is None:
        return AddressCheckResult.INVALID_ENCODING

    if create_checksum(public_key, backend) != checksum:
        return AddressCheckResult.INVALID_CHECKSUM
    return AddressCheckResult.VALID


def is_valid_address(address: str, backend: CryptoBackend = DEFAULT_BACKEND) -> bool:
    return check_address(address, backend) is AddressCheckResult.VALID


def parse_address(address: str, backend: CryptoBackend = DEFAULT_BACKEND) -> bytes:
    """Return the public key of a valid address.

    Raises:
        ValueError: If *address* is not valid; the message names the reason.
    """
    result = check_address(address, backend)
    if result is not AddressCheckResult.VALID:
        raise ValueError(f"invalid address ({result.value}): {address!r}")
    parts = split_address(address)
    key = decode_public_key(parts[1]) if parts is not None else None
    if key is None:
        raise ValueError(f"invalid address: {address!r}")
    return key
