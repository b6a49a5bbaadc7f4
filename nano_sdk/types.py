"""Core types for the Nano SDK.

All public-facing data structures are defined here as Pydantic v2 models.
Wire format follows the node RPC protocol: balances are decimal strings
in raw units, hashes and signatures are uppercase hex, and accounts are
either ``nano_``/``xrb_``/``ban_`` addresses or 64-digit hex public keys.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from nano_sdk.amount import Amount
from nano_sdk.encoding import bytes_to_hex, hex_to_bytes


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class NanoType(str, Enum):
    """Which ledger an account lives on."""

    NANO = "nano"
    BANANO = "banano"


class AccountPrefix(str, Enum):
    """Recognised address prefixes. The prefix carries no key material."""

    NANO = "nano_"
    XRB = "xrb_"
    BANANO = "ban_"

    @property
    def network(self) -> NanoType:
        return NanoType.BANANO if self is AccountPrefix.BANANO else NanoType.NANO


class BlockSubtype(str, Enum):
    """Metadata tag for a state block. Not part of the hashed preimage."""

    SEND = "send"
    RECEIVE = "receive"
    OPEN = "open"
    CHANGE = "change"
    EPOCH = "epoch"


class AddressCheckResult(str, Enum):
    """Outcome of :func:`nano_sdk.identity.check_address`."""

    VALID = "valid"
    INVALID_LENGTH = "invalid_length"
    INVALID_ENCODING = "invalid_encoding"
    INVALID_CHECKSUM = "invalid_checksum"
    INVALID_PREFIX = "invalid_prefix"
    INVALID_OTHER = "invalid_other"


class BlockError(str, Enum):
    """Field that prevented a state block from being hashed."""

    INVALID_ACCOUNT = "invalid_account"
    INVALID_PREVIOUS = "invalid_previous"
    INVALID_REPRESENTATIVE = "invalid_representative"
    INVALID_LINK = "invalid_link"
    INVALID_BALANCE = "invalid_balance"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class InvalidBlockError(ValueError):
    """Raised when a state block cannot be serialised for hashing."""

    def __init__(self, reason: BlockError, value: Any = None) -> None:
        self.reason = reason
        self.value = value
        super().__init__(f"{reason.value}: {value!r}")


class IncompleteBlockError(ValueError):
    """Raised when a block lacks the signature or work needed on the wire."""


# ---------------------------------------------------------------------------
# Account / representative / link fields
# ---------------------------------------------------------------------------


class RawKey(BaseModel):
    """A 32-byte key or hash given as 64 hex digits.

    The text is kept verbatim; it is checked when the block is hashed.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["raw"] = "raw"
    value: str

    def __str__(self) -> str:
        return self.value


class AddressKey(BaseModel):
    """A key given as an account address (``nano_...``)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["address"] = "address"
    value: str

    def __str__(self) -> str:
        return self.value


#: Tagged union of the two accepted forms; resolved to bytes at hashing time.
KeyField = Union[RawKey, AddressKey]


def key_field(value: Any) -> Any:
    """Tag a string or bytes value as :class:`RawKey` or :class:`AddressKey`.

    Anything else (an already tagged value, a dict) is returned unchanged
    for Pydantic to validate.
    """
    if isinstance(value, (bytes, bytearray)):
        return RawKey(value=bytes_to_hex(bytes(value)))
    if isinstance(value, str):
        if value.startswith(tuple(p.value for p in AccountPrefix)):
            return AddressKey(value=value)
        return RawKey(value=value)
    return value


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

#: Sentinel ``previous`` value of an account's first (open) block.
ZERO_PREVIOUS = "0"


class StateBlock(BaseModel):
    """A ledger state block.

    Lifecycle: build with every field except ``hash``/``signature``, hash
    it, sign the hash, then attach proof-of-work from an external source.
    Changing any hashed field after ``hash`` is set leaves a stale
    signature; nothing re-validates it automatically.
    """

    type: Literal["state"] = "state"
    previous: str
    account: KeyField
    representative: KeyField
    balance: Amount
    link: KeyField
    subtype: BlockSubtype | None = None
    work: str | None = None
    hash: bytes | None = None
    signature: bytes | None = None

    @field_validator("account", "representative", "link", mode="before")
    @classmethod
    def _tag_key_field(cls, v: Any) -> Any:
        return key_field(v)

    @field_validator("hash", "signature", mode="before")
    @classmethod
    def _parse_hex(cls, v: Any) -> Any:
        if isinstance(v, str):
            decoded = hex_to_bytes(v)
            if decoded is None:
                raise ValueError("expected a hex string")
            return decoded
        return v

    @field_serializer("account", "representative", "link")
    def _serialize_key_field(self, v: RawKey | AddressKey, _info: Any) -> str:
        return v.value

    @field_serializer("hash", "signature")
    def _serialize_bytes(self, v: bytes | None, _info: Any) -> str | None:
        return None if v is None else bytes_to_hex(v)

    @property
    def is_open(self) -> bool:
        """True if this is the first block of its account."""
        return self.previous == ZERO_PREVIOUS or self.previous.strip("0") == ""

    def to_rpc_json(self) -> dict[str, str]:
        """The ``block`` object a node's ``process`` action expects.

        Raises:
            IncompleteBlockError: If the block is unsigned or has no work.
        """
        if self.signature is None:
            raise IncompleteBlockError("block has no signature")
        if self.work is None:
            raise IncompleteBlockError("block has no proof-of-work")
        return {
            "type": "state",
            "account": str(self.account),
            "previous": self.previous,
            "representative": str(self.representative),
            "balance": self.balance.to_raw_string(),
            "link": str(self.link),
            "signature": bytes_to_hex(self.signature),
            "work": self.work,
        }


# ---------------------------------------------------------------------------
# Node response models
# ---------------------------------------------------------------------------


class AccountInfo(BaseModel):
    """Result of the node's ``account_info`` action."""

    model_config = ConfigDict(extra="ignore")

    frontier: str
    open_block: str
    representative_block: str
    balance: Amount
    modified_timestamp: int
    block_count: Annotated[int, Field(ge=0)]
    account_version: int = 0
    confirmation_height: Annotated[int, Field(ge=0)] = 0
    confirmation_height_frontier: str = ""
    representative: str | None = None


class AccountBalance(BaseModel):
    """Result of the node's ``account_balance`` action."""

    model_config = ConfigDict(extra="ignore")

    balance: Amount
    pending: Amount = Field(default_factory=Amount.zero)
    receivable: Amount = Field(default_factory=Amount.zero)


class PendingBlock(BaseModel):
    """An incoming send waiting to be received."""

    hash: str
    amount: Amount
    source: str | None = None


class BlockCount(BaseModel):
    """Result of the node's ``block_count`` action."""

    model_config = ConfigDict(extra="ignore")

    count: Annotated[int, Field(ge=0)]
    unchecked: Annotated[int, Field(ge=0)] = 0
    cemented: Annotated[int, Field(ge=0)] = 0


class NodeVersion(BaseModel):
    """Result of the node's ``version`` action."""

    model_config = ConfigDict(extra="ignore")

    rpc_version: str
    store_version: str | None = None
    protocol_version: str | None = None
    node_vendor: str
