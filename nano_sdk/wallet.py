"""High-level wallet abstraction.

:class:`NanoWallet` holds one seed and the accounts derived from it,
keyed by index. It is the recommended entry point for applications that
hold keys; everything below it is stateless.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator

from nano_sdk.account import NanoAccount, new_account
from nano_sdk.amount import Amount
from nano_sdk.block import build_receive_block, build_send_block
from nano_sdk.config import NanoConfig
from nano_sdk.identity import SEED_BYTES, generate_seed, seed_from_message
from nano_sdk.types import AccountPrefix, PendingBlock, StateBlock

if TYPE_CHECKING:
    from nano_sdk.client import NanoClient

logger = logging.getLogger(__name__)


class WalletError(Exception):
    """Base class for wallet bookkeeping errors."""


class IndexAlreadyExistsError(WalletError):
    """An account with this index is already in the wallet."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"account index {index} already exists")


class NanoWallet:
    """In-memory wallet holding a seed and its derived accounts.

    Wallets are created via :meth:`create`, :meth:`from_seed`,
    :meth:`from_message` or :meth:`from_config`. The seed is held in
    memory and never serialised automatically; callers must manage
    persistence and encryption.
    """

    __slots__ = ("_seed", "_prefix", "_representative", "_accounts")

    def __init__(
        self,
        seed: bytes,
        prefix: AccountPrefix | str = AccountPrefix.NANO,
        *,
        representative: str | None = None,
    ) -> None:
        if len(seed) != SEED_BYTES:
            raise ValueError(f"seed must be exactly {SEED_BYTES} bytes, got {len(seed)}")
        self._seed = seed
        self._prefix = AccountPrefix(prefix)
        self._representative = representative
        self._accounts: dict[int, NanoAccount] = {}

    # ----- constructors ----------------------------------------------------

    @classmethod
    def create(
        cls, prefix: AccountPrefix | str = AccountPrefix.NANO, *, with_base_account: bool = True
    ) -> "NanoWallet":
        """Generate a wallet with a random seed, holding account 0 by default."""
        return cls.from_seed(generate_seed(), prefix, with_base_account=with_base_account)

    @classmethod
    def from_seed(
        cls,
        seed: bytes,
        prefix: AccountPrefix | str = AccountPrefix.NANO,
        *,
        with_base_account: bool = True,
    ) -> "NanoWallet":
        """Restore a wallet from a 32-byte seed."""
        wallet = cls(seed, prefix)
        if with_base_account:
            wallet.new_account(0)
        return wallet

    @classmethod
    def from_message(
        cls, message: str, prefix: AccountPrefix | str = AccountPrefix.NANO
    ) -> "NanoWallet":
        """Derive the seed from text. See :func:`nano_sdk.identity.seed_from_message`."""
        return cls.from_seed(seed_from_message(message), prefix)

    @classmethod
    def from_config(cls, config: NanoConfig, seed: bytes | None = None) -> "NanoWallet":
        """Build a wallet using the configured prefix and default representative.

        A random seed is generated when *seed* is omitted. Account 0 is
        derived immediately.
        """
        wallet = cls(
            generate_seed() if seed is None else seed,
            config.prefix,
            representative=config.representative,
        )
        wallet.new_account(0)
        return wallet

    # ----- properties ------------------------------------------------------

    @property
    def seed(self) -> bytes:
        return self._seed

    @property
    def prefix(self) -> AccountPrefix:
        return self._prefix

    @property
    def representative(self) -> str | None:
        """Fallback representative for blocks when the node reports none."""
        return self._representative

    @property
    def last_index(self) -> int:
        """Highest account index held, or -1 for an empty wallet."""
        return max(self._accounts, default=-1)

    # ----- account bookkeeping ---------------------------------------------

    def new_account(self, index: int | None = None) -> NanoAccount:
        """Derive and add an account.

        Args:
            index: Account index. Defaults to one past :attr:`last_index`.

        Raises:
            IndexAlreadyExistsError: If *index* is already held.
        """
        if index is None:
            index = self.last_index + 1
        if index in self._accounts:
            raise IndexAlreadyExistsError(index)
        account = new_account(self._seed, index, self._prefix)
        self._accounts[index] = account
        logger.debug("derived account %d: %s", index, account.address)
        return account

    def add_account(self, account: NanoAccount) -> None:
        """Add an existing account, e.g. one refreshed with node state.

        Raises:
            IndexAlreadyExistsError: If its index is already held.
        """
        if account.index in self._accounts:
            raise IndexAlreadyExistsError(account.index)
        self._accounts[account.index] = account

    def replace_account(self, account: NanoAccount) -> None:
        """Store *account* under its index, replacing any previous entry."""
        self._accounts[account.index] = account

    def remove_account(self, index: int) -> None:
        """Forget account *index*. Unknown indexes are ignored."""
        self._accounts.pop(index, None)

    def account(self, index: int) -> NanoAccount | None:
        return self._accounts.get(index)

    def __contains__(self, index: object) -> bool:
        return index in self._accounts

    def __iter__(self) -> Iterator[NanoAccount]:
        return iter(sorted(self._accounts.values(), key=lambda a: a.index))

    def __len__(self) -> int:
        return len(self._accounts)

    def _require(self, index: int) -> NanoAccount:
        account = self._accounts.get(index)
        if account is None:
            raise KeyError(f"no account with index {index}")
        return account

    # ----- blocks ----------------------------------------------------------

    def _representative_for(self, account: NanoAccount, representative: str | None) -> str | None:
        # Explicit argument, then the node-reported representative, then the default.
        if representative:
            return representative
        if account.account_info is not None and account.account_info.representative:
            return account.account_info.representative
        return self._representative

    def send(
        self,
        index: int,
        destination: str,
        amount: Amount,
        *,
        representative: str | None = None,
    ) -> StateBlock:
        """Build a signed send block from account *index*.

        The account must have been refreshed from a node first.
        """
        account = self._require(index)
        return build_send_block(
            account,
            destination,
            amount,
            representative=self._representative_for(account, representative),
        )

    def receive(
        self, index: int, pending: PendingBlock, *, representative: str | None = None
    ) -> StateBlock:
        """Build a signed receive (or open) block for a pending send.

        Opening an account needs a representative; the wallet default is
        used when none is given.
        """
        account = self._require(index)
        return build_receive_block(
            account,
            pending.hash,
            pending.amount,
            representative=self._representative_for(account, representative),
        )

    # ----- network queries -------------------------------------------------

    async def refresh(self, client: "NanoClient", index: int) -> NanoAccount:
        """Fetch account *index*'s state from a node and store it."""
        account = await client.refresh_account(self._require(index))
        self.replace_account(account)
        return account

    async def receivable(
        self, client: "NanoClient", index: int, threshold: Amount | None = None
    ) -> list[PendingBlock]:
        """List sends waiting to be received by account *index*."""
        return await client.receivable(self._require(index).address, threshold=threshold)
