"""State block serialisation, hashing and signing.

Every ledger transaction is a *state block*. Its hash is Blake2b-256 over
a fixed 176-byte preimage, and its signature is Ed25519/Blake2b over that
hash. The helpers at the bottom build send, receive, open and change
blocks from an account's node-reported state.
"""

from __future__ import annotations

from typing import Self

from nano_sdk.account import NanoAccount
from nano_sdk.amount import BALANCE_BYTES, Amount
from nano_sdk.crypto import DEFAULT_BACKEND, CryptoBackend
from nano_sdk.encoding import bytes_to_hex, hex_to_bytes, pad_left
from nano_sdk.identity import (
    decode_public_key,
    sign_message,
    split_address,
    verify_signature,
)
from nano_sdk.types import (
    ZERO_PREVIOUS,
    AddressKey,
    BlockError,
    BlockSubtype,
    InvalidBlockError,
    RawKey,
    StateBlock,
)

HASH_BYTES = 32
FIELD_BYTES = 32

#: Leading preamble field of every state block preimage (value 6).
STATE_BLOCK_PREAMBLE = pad_left(b"\x06", FIELD_BYTES)

#: Total preimage size: preamble, account, previous, representative,
#: balance and link.
PREIMAGE_BYTES = 5 * FIELD_BYTES + BALANCE_BYTES


# ---------------------------------------------------------------------------
# Canonical preimage
# ---------------------------------------------------------------------------


def _resolve_key(field: RawKey | AddressKey, reason: BlockError) -> bytes:
    """Turn an account/representative/link field into its 32 raw bytes."""
    if isinstance(field, AddressKey):
        parts = split_address(field.value)
        key = decode_public_key(parts[1]) if parts is not None else None
    elif len(field.value) == 2 * FIELD_BYTES:
        key = hex_to_bytes(field.value)
    else:
        key = None
    if key is None:
        raise InvalidBlockError(reason, field.value)
    return key


def _resolve_previous(previous: str) -> bytes:
    if previous == ZERO_PREVIOUS:
        return bytes(FIELD_BYTES)
    decoded = hex_to_bytes(previous) if len(previous) == 2 * FIELD_BYTES else None
    if decoded is None:
        raise InvalidBlockError(BlockError.INVALID_PREVIOUS, previous)
    return decoded


def state_block_preimage(block: StateBlock) -> bytes:
    """Produce the canonical bytes that are hashed to identify *block*.

    Layout (all big-endian, left-zero-padded)::

        preamble        32 bytes, value 0x06
        account         32 bytes, public key
        previous        32 bytes, zero for an account's first block
        representative  32 bytes, public key
        balance         16 bytes, raw units
        link            32 bytes, destination key or source hash

    Address-form fields are decoded to their public key. The checksum of
    an address is not verified here; use
    :func:`nano_sdk.identity.check_address` for that.

    Raises:
        InvalidBlockError: For the first field that cannot be packed,
            checked in the order account, previous, representative,
            link, balance.
    """
    account = _resolve_key(block.account, BlockError.INVALID_ACCOUNT)
    previous = _resolve_previous(block.previous)
    representative = _resolve_key(block.representative, BlockError.INVALID_REPRESENTATIVE)
    link = _resolve_key(block.link, BlockError.INVALID_LINK)
    balance = block.balance.to_raw_bytes()
    if len(balance) > BALANCE_BYTES:
        raise InvalidBlockError(BlockError.INVALID_BALANCE, block.balance.to_raw_string())

    return b"".join(
        (
            STATE_BLOCK_PREAMBLE,
            pad_left(account, FIELD_BYTES),
            pad_left(previous, FIELD_BYTES),
            pad_left(representative, FIELD_BYTES),
            pad_left(balance, BALANCE_BYTES),
            pad_left(link, FIELD_BYTES),
        )
    )


def hash_state_block(block: StateBlock, backend: CryptoBackend = DEFAULT_BACKEND) -> bytes:
    """Return the 32-byte block hash.

    Raises:
        InvalidBlockError: If a field cannot be packed.
    """
    return backend.keyed_hash(state_block_preimage(block), HASH_BYTES)


# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------


def sign_state_block_hash(
    block_hash: bytes,
    private_key: bytes,
    public_key: bytes | None = None,
    backend: CryptoBackend = DEFAULT_BACKEND,
) -> bytes:
    """Sign a 32-byte block hash.

    Args:
        block_hash: Output of :func:`hash_state_block`.
        private_key: The signing account's 32-byte private key.
        public_key: Its public key; derived from *private_key* if omitted.

    Returns:
        The 64-byte signature.

    Raises:
        ValueError: If the hash or a key has the wrong length.
    """
    if len(block_hash) != HASH_BYTES:
        raise ValueError(f"block hash must be exactly {HASH_BYTES} bytes, got {len(block_hash)}")
    return sign_message(block_hash, private_key, public_key, backend)


def sign_block(
    block: StateBlock,
    private_key: bytes,
    public_key: bytes | None = None,
    backend: CryptoBackend = DEFAULT_BACKEND,
) -> StateBlock:
    """Return a copy of *block* with ``hash`` and ``signature`` filled in."""
    block_hash = hash_state_block(block, backend)
    signature = sign_state_block_hash(block_hash, private_key, public_key, backend)
    return block.model_copy(update={"hash": block_hash, "signature": signature})


def verify_block(block: StateBlock, backend: CryptoBackend = DEFAULT_BACKEND) -> bool:
    """Check that *block* is signed by its own account.

    The hash is recomputed from the fields; a stored ``hash`` that no
    longer matches them makes the block invalid.
    """
    if block.signature is None:
        return False
    try:
        block_hash = hash_state_block(block, backend)
        account_key = _resolve_key(block.account, BlockError.INVALID_ACCOUNT)
    except InvalidBlockError:
        return False
    if block.hash is not None and block.hash != block_hash:
        return False
    return verify_signature(account_key, block_hash, block.signature, backend)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class StateBlockBuilder:
    """Fluent builder for :class:`StateBlock` instances.

    Example::

        block = (
            StateBlockBuilder()
            .account("nano_1hdda1...")
            .previous(ZERO_PREVIOUS)
            .representative("nano_3ixkby...")
            .balance(Amount.from_display("1.5"))
            .link("A60103F1B5DEF656...")
            .build()
        )
    """

    def __init__(self) -> None:
        self._account: str | bytes | None = None
        self._previous: str | None = None
        self._representative: str | bytes | None = None
        self._balance: Amount | None = None
        self._link: str | bytes | None = None
        self._subtype: BlockSubtype | None = None
        self._work: str | None = None

    def account(self, account: str | bytes) -> Self:
        """Set the owning account (address, hex key or raw bytes)."""
        self._account = account
        return self

    def previous(self, previous: str | bytes) -> Self:
        """Set the frontier hash, or :data:`ZERO_PREVIOUS` for an open block."""
        self._previous = bytes_to_hex(previous) if isinstance(previous, bytes) else previous
        return self

    def representative(self, representative: str | bytes) -> Self:
        self._representative = representative
        return self

    def balance(self, balance: Amount | str | int) -> Self:
        """Set the balance after this block. Strings and ints are raw units."""
        self._balance = balance if isinstance(balance, Amount) else Amount.from_raw(balance)
        return self

    def link(self, link: str | bytes) -> Self:
        """Set the destination key (send) or source block hash (receive)."""
        self._link = link
        return self

    def subtype(self, subtype: BlockSubtype) -> Self:
        self._subtype = subtype
        return self

    def work(self, work: str) -> Self:
        """Attach externally generated proof-of-work."""
        self._work = work
        return self

    def build(self) -> StateBlock:
        """Return the constructed block.

        Raises:
            ValueError: If any hashed field is missing.
        """
        missing: list[str] = []
        if self._account is None:
            missing.append("account")
        if self._previous is None:
            missing.append("previous")
        if self._representative is None:
            missing.append("representative")
        if self._balance is None:
            missing.append("balance")
        if self._link is None:
            missing.append("link")
        if missing:
            raise ValueError(f"missing required fields: {', '.join(missing)}")

        return StateBlock(
            account=self._account,
            previous=self._previous,
            representative=self._representative,
            balance=self._balance,
            link=self._link,
            subtype=self._subtype,
            work=self._work,
        )


# ---------------------------------------------------------------------------
# Blocks from account state
# ---------------------------------------------------------------------------


class BlockBuilderError(Exception):
    """Raised when account state does not allow the requested block."""


class NoFrontierError(BlockBuilderError):
    """The account has no known frontier (never opened or never fetched)."""


class NoRepresentativeError(BlockBuilderError):
    """No representative is known for the account."""


class InsufficientBalanceError(BlockBuilderError):
    """The account balance is lower than the amount to send."""


class InvalidDestinationError(BlockBuilderError):
    """The destination address cannot be decoded."""


def _frontier_and_representative(
    account: NanoAccount, representative: str | None
) -> tuple[str, str]:
    info = account.account_info
    if info is None or not info.frontier:
        raise NoFrontierError(f"account {account.address} has no frontier")
    rep = representative or info.representative
    if not rep:
        raise NoRepresentativeError(f"account {account.address} has no representative")
    return info.frontier, rep


def build_send_block(
    account: NanoAccount,
    destination: str,
    amount: Amount,
    *,
    representative: str | None = None,
    backend: CryptoBackend = DEFAULT_BACKEND,
) -> StateBlock:
    """Build and sign a block sending *amount* to *destination*.

    Raises:
        NoFrontierError: If the account's state has not been fetched.
        NoRepresentativeError: If no representative is known.
        InsufficientBalanceError: If *amount* exceeds the balance.
        InvalidDestinationError: If *destination* cannot be decoded.
    """
    frontier, rep = _frontier_and_representative(account, representative)
    if amount > account.balance:
        raise InsufficientBalanceError(
            f"cannot send {amount.to_raw_string()} raw from a balance of "
            f"{account.balance.to_raw_string()} raw"
        )
    parts = split_address(destination)
    destination_key = decode_public_key(parts[1]) if parts is not None else None
    if destination_key is None:
        raise InvalidDestinationError(f"cannot decode destination {destination!r}")

    block = StateBlock(
        previous=frontier,
        account=account.address,
        representative=rep,
        balance=account.balance - amount,
        link=destination_key,
        subtype=BlockSubtype.SEND,
    )
    return sign_block(block, account.private_key, account.public_key, backend)


def build_receive_block(
    account: NanoAccount,
    source_hash: str,
    amount: Amount,
    *,
    representative: str | None = None,
    backend: CryptoBackend = DEFAULT_BACKEND,
) -> StateBlock:
    """Build and sign a block receiving *amount* from send block *source_hash*.

    An account without node state gets an open block, which needs an
    explicit *representative*.

    Raises:
        NoRepresentativeError: If no representative is known.
    """
    if account.account_info is None:
        if not representative:
            raise NoRepresentativeError(
                f"opening account {account.address} requires a representative"
            )
        previous, rep, subtype = ZERO_PREVIOUS, representative, BlockSubtype.OPEN
    else:
        previous, rep = _frontier_and_representative(account, representative)
        subtype = BlockSubtype.RECEIVE

    block = StateBlock(
        previous=previous,
        account=account.address,
        representative=rep,
        balance=account.balance + amount,
        link=source_hash,
        subtype=subtype,
    )
    return sign_block(block, account.private_key, account.public_key, backend)


def build_change_block(
    account: NanoAccount,
    representative: str,
    *,
    backend: CryptoBackend = DEFAULT_BACKEND,
) -> StateBlock:
    """Build and sign a block changing the account's representative."""
    frontier, rep = _frontier_and_representative(account, representative)
    block = StateBlock(
        previous=frontier,
        account=account.address,
        representative=rep,
        balance=account.balance,
        link=bytes(FIELD_BYTES),
        subtype=BlockSubtype.CHANGE,
    )
    return sign_block(block, account.private_key, account.public_key, backend)
