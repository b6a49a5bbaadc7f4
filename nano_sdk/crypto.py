"""Cryptographic primitives consumed by the account and block layers.

The ledger signs with Ed25519 where every internal SHA-512 is replaced by
Blake2b-512, and hashes with unkeyed Blake2b of variable output length.
The rest of the SDK only talks to the three-method :class:`CryptoBackend`
protocol, so tests can swap in a deterministic stub.

:class:`Blake2bEd25519` is the production backend. Blake2b comes from
:mod:`hashlib`; the curve arithmetic comes from libsodium via PyNaCl's
low-level ``crypto_core_ed25519_*`` and ``crypto_scalarmult_ed25519_*``
bindings.
"""

from __future__ import annotations

import hashlib
from typing import Protocol, runtime_checkable

from nacl import bindings
from nacl.exceptions import CryptoError

KEY_BYTES = 32
SIGNATURE_BYTES = 64


@runtime_checkable
class CryptoBackend(Protocol):
    """The hash and signature capability the SDK depends on."""

    def keyed_hash(self, message: bytes, output_length: int) -> bytes:
        """Unkeyed Blake2b of *message* with an *output_length*-byte digest."""
        ...

    def derive_public_key(self, private_key: bytes) -> bytes:
        """Return the 32-byte public key for a 32-byte private key."""
        ...

    def sign(self, private_key: bytes, public_key: bytes, message: bytes) -> bytes:
        """Return the 64-byte signature of *message*."""
        ...


def _reduce(digest: bytes) -> bytes:
    """Reduce a 64-byte little-endian integer modulo the group order."""
    return bindings.crypto_core_ed25519_scalar_reduce(digest)


def _check_key(name: str, key: bytes) -> None:
    if len(key) != KEY_BYTES:
        raise ValueError(f"{name} must be exactly {KEY_BYTES} bytes, got {len(key)}")


class Blake2bEd25519:
    """Ed25519 over Blake2b-512, as used for ledger account keys.

    The curve and scalar arithmetic is libsodium's, reached through
    PyNaCl's ``crypto_core_ed25519_*`` and ``crypto_scalarmult_ed25519_*``
    bindings; only the two hash steps of the signature scheme are wired
    up here, with Blake2b-512 where standard Ed25519 uses SHA-512. This
    keeps the whole crypto stack on the one audited library the SDK
    already depends on, instead of adding a separate native extension.
    Any other implementation can be plugged in through
    :class:`CryptoBackend`.

    Instances hold no state; a single shared instance is safe to use from
    any number of threads.
    """

    __slots__ = ()

    def keyed_hash(self, message: bytes, output_length: int) -> bytes:
        return hashlib.blake2b(message, digest_size=output_length).digest()

    def _expand(self, private_key: bytes) -> tuple[bytes, bytes]:
        """Split the Blake2b-512 expansion into ``(scalar, nonce_prefix)``."""
        _check_key("private key", private_key)
        h = bytearray(self.keyed_hash(private_key, 64))
        h[0] &= 248
        h[31] &= 127
        h[31] |= 64
        scalar = _reduce(bytes(h[:32]) + bytes(32))
        return scalar, bytes(h[32:])

    def derive_public_key(self, private_key: bytes) -> bytes:
        scalar, _ = self._expand(private_key)
        return bindings.crypto_scalarmult_ed25519_base_noclamp(scalar)

    def sign(self, private_key: bytes, public_key: bytes, message: bytes) -> bytes:
        _check_key("public key", public_key)
        scalar, prefix = self._expand(private_key)
        r = _reduce(self.keyed_hash(prefix + message, 64))
        big_r = bindings.crypto_scalarmult_ed25519_base_noclamp(r)
        k = _reduce(self.keyed_hash(big_r + public_key + message, 64))
        s = bindings.crypto_core_ed25519_scalar_add(
            r, bindings.crypto_core_ed25519_scalar_mul(k, scalar)
        )
        return big_r + s

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        """Check *signature* over *message*; malformed input is simply invalid."""
        if len(public_key) != KEY_BYTES or len(signature) != SIGNATURE_BYTES:
            return False
        big_r, s = signature[:32], signature[32:]
        # S must already be a canonical scalar.
        if _reduce(s + bytes(32)) != s:
            return False
        k = _reduce(self.keyed_hash(big_r + public_key + message, 64))
        try:
            expected = bindings.crypto_core_ed25519_add(
                big_r, bindings.crypto_scalarmult_ed25519_noclamp(k, public_key)
            )
            actual = bindings.crypto_scalarmult_ed25519_base_noclamp(s)
        except (CryptoError, ValueError, TypeError):
            return False
        return actual == expected


#: Shared default backend.
DEFAULT_BACKEND = Blake2bEd25519()
