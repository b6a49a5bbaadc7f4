"""Ledger accounts derived from a wallet seed."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from nano_sdk.amount import Amount
from nano_sdk.crypto import DEFAULT_BACKEND, CryptoBackend
from nano_sdk.identity import (
    create_checksum,
    derive_private_key,
    derive_public_key,
    encode_public_key,
)
from nano_sdk.types import AccountInfo, AccountPrefix, NanoType

_U32_MAX = 0xFFFFFFFF


class NanoAccount(BaseModel):
    """A derived account key pair plus the node's last reported state.

    Immutable. Refreshing node state returns a new instance via
    :meth:`with_info`. The private key is excluded from ``repr`` and from
    serialisation.
    """

    model_config = ConfigDict(frozen=True)

    index: Annotated[int, Field(ge=0, le=_U32_MAX)]
    private_key: bytes = Field(repr=False, exclude=True)
    public_key: bytes
    prefix: AccountPrefix = AccountPrefix.NANO
    account_info: AccountInfo | None = None

    @field_serializer("public_key")
    def _serialize_public_key(self, v: bytes, _info: Any) -> str:
        return v.hex().upper()

    @property
    def encoded_public_key(self) -> str:
        encoded = encode_public_key(self.public_key)
        if encoded is None:
            raise ValueError("public key could not be encoded")
        return encoded

    @property
    def checksum(self) -> str:
        checksum = create_checksum(self.public_key)
        if checksum is None:
            raise ValueError("checksum could not be encoded")
        return checksum

    @property
    def address(self) -> str:
        """The shareable address, e.g. ``nano_1hdda1...``."""
        return self.prefix.value + self.encoded_public_key + self.checksum

    @property
    def network(self) -> NanoType:
        return self.prefix.network

    @property
    def balance(self) -> Amount:
        """Balance from the last ``account_info``; zero when never fetched."""
        if self.account_info is None:
            return Amount.zero()
        return self.account_info.balance

    def with_info(self, info: AccountInfo | None) -> "NanoAccount":
        return self.model_copy(update={"account_info": info})


def new_account(
    seed: bytes,
    index: int,
    prefix: AccountPrefix | str = AccountPrefix.NANO,
    backend: CryptoBackend = DEFAULT_BACKEND,
) -> NanoAccount:
    """Derive account *index* of *seed*.

    Raises:
        ValueError: If *seed* is not 32 bytes or *index* is out of range.
    """
    private_key = derive_private_key(seed, index, backend)
    return NanoAccount(
        index=index,
        private_key=private_key,
        public_key=derive_public_key(private_key, backend),
        prefix=AccountPrefix(prefix),
    )
