"""Async client for a node's RPC API.

:class:`NanoClient` wraps the read-only node actions a wallet needs to
build blocks: account state, balances and receivable sends. All I/O uses
:mod:`httpx`, so the client is fully async and compatible with
``asyncio``. Publishing blocks and generating work are left to other
tooling.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from nano_sdk.account import NanoAccount
from nano_sdk.amount import Amount
from nano_sdk.config import NanoConfig
from nano_sdk.types import (
    AccountBalance,
    AccountInfo,
    BlockCount,
    NodeVersion,
    PendingBlock,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class NanoClientError(Exception):
    """Base class for every error raised by :class:`NanoClient`."""


class NanoConnectionError(NanoClientError):
    """Raised when the SDK cannot reach the node."""


class NanoTimeoutError(NanoClientError):
    """Raised when a request exceeds its deadline."""


class NanoHttpError(NanoClientError):
    """Raised when the node answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body[:200]}")


class NanoRpcError(NanoClientError):
    """Raised when the node answers with an ``{"error": ...}`` body."""

    def __init__(self, action: str, message: str) -> None:
        self.action = action
        self.message = message
        super().__init__(f"{action}: {message}")


class NanoAccountNotFoundError(NanoRpcError):
    """The node has no record of the account (it was never opened)."""


_ACCOUNT_NOT_FOUND = "Account not found"


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class NanoClient:
    """Async RPC client for a node.

    Args:
        node_url: RPC endpoint of the node (e.g. ``"http://localhost:7076"``).
        timeout: Default request timeout in seconds.

    Example::

        async with NanoClient("http://localhost:7076") as client:
            info = await client.account_info("nano_1hdda1...")
    """

    def __init__(self, node_url: str, *, timeout: float = 15.0) -> None:
        self._node_url = node_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, config: NanoConfig) -> "NanoClient":
        return cls(config.node_url, timeout=config.timeout)

    # ----- lifecycle -------------------------------------------------------

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "NanoClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ----- internal helpers ------------------------------------------------

    async def _call(self, action: str, **params: Any) -> dict[str, Any]:
        """POST one action and return the decoded body."""
        client = await self._ensure_client()
        payload = {"action": action, **params}
        logger.debug("rpc %s -> %s", action, self._node_url)
        try:
            resp = await client.post(self._node_url, json=payload)
        except httpx.ConnectError as exc:
            raise NanoConnectionError(f"cannot reach {self._node_url}: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise NanoTimeoutError(f"{action} request to {self._node_url} timed out") from exc
        except httpx.TransportError as exc:
            raise NanoConnectionError(f"{action} request to {self._node_url} failed: {exc}") from exc

        if not resp.is_success:
            raise NanoHttpError(resp.status_code, resp.text)

        try:
            body = resp.json()
        except ValueError as exc:
            raise NanoClientError(f"{action}: node returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise NanoClientError(f"{action}: expected a JSON object, got {type(body).__name__}")

        error = body.get("error")
        if error is not None:
            logger.warning("rpc %s failed: %s", action, error)
            if error == _ACCOUNT_NOT_FOUND:
                raise NanoAccountNotFoundError(action, error)
            raise NanoRpcError(action, str(error))
        return body

    # ----- public API ------------------------------------------------------

    async def account_info(self, address: str) -> AccountInfo:
        """Fetch frontier, balance and representative of an account.

        Raises:
            NanoAccountNotFoundError: If the account has not been opened.
        """
        result = await self._call("account_info", account=address, representative="true")
        return AccountInfo.model_validate(result)

    async def account_balance(self, address: str) -> AccountBalance:
        """Fetch the confirmed and receivable balance of an account."""
        result = await self._call("account_balance", account=address)
        return AccountBalance.model_validate(result)

    async def receivable(
        self,
        address: str,
        *,
        threshold: Amount | None = None,
        count: int | None = None,
        include_only_confirmed: bool = True,
    ) -> list[PendingBlock]:
        """List sends to *address* that have not been received yet.

        Args:
            address: Receiving account.
            threshold: Skip sends smaller than this amount.
            count: Maximum number of entries to return.
            include_only_confirmed: Only list confirmed sends.
        """
        params: dict[str, Any] = {
            "account": address,
            "source": "true",
            "threshold": (threshold or Amount.zero()).to_raw_string(),
            "include_only_confirmed": "true" if include_only_confirmed else "false",
        }
        if count is not None:
            params["count"] = str(count)
        result = await self._call("receivable", **params)

        # Nodes answer with "" instead of {} when nothing is receivable.
        blocks = result.get("blocks") or {}
        return [
            PendingBlock(hash=block_hash, amount=entry["amount"], source=entry.get("source"))
            for block_hash, entry in blocks.items()
        ]

    async def block_count(self) -> BlockCount:
        """Return the node's ledger block counters."""
        result = await self._call("block_count")
        return BlockCount.model_validate(result)

    async def version(self) -> NodeVersion:
        """Return the node's version information."""
        result = await self._call("version")
        return NodeVersion.model_validate(result)

    async def refresh_account(self, account: NanoAccount) -> NanoAccount:
        """Return *account* updated with its current node state.

        An account the node has never seen comes back with no state.
        """
        try:
            info = await self.account_info(account.address)
        except NanoAccountNotFoundError:
            info = None
        return account.with_info(info)
