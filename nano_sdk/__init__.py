"""Nano Python SDK.

Provides everything needed to create correctly signed state blocks from
Python: seed and key derivation, address encoding and validation, exact
raw-unit balance arithmetic, canonical block hashing and signing, a
wallet, and an async client for a node's RPC API.

Quick start::

    from nano_sdk import AddressCheckResult, NanoWallet, check_address

    wallet = NanoWallet.create()
    address = wallet.account(0).address
    assert check_address(address) is AddressCheckResult.VALID
"""

from nano_sdk.account import NanoAccount, new_account
from nano_sdk.amount import Amount
from nano_sdk.base32 import BASE32, NanoBase32
from nano_sdk.block import (
    BlockBuilderError,
    InsufficientBalanceError,
    InvalidDestinationError,
    NoFrontierError,
    NoRepresentativeError,
    StateBlockBuilder,
    build_change_block,
    build_receive_block,
    build_send_block,
    hash_state_block,
    sign_block,
    sign_state_block_hash,
    state_block_preimage,
    verify_block,
)
from nano_sdk.client import (
    NanoAccountNotFoundError,
    NanoClient,
    NanoClientError,
    NanoConnectionError,
    NanoHttpError,
    NanoRpcError,
    NanoTimeoutError,
)
from nano_sdk.config import NanoConfig
from nano_sdk.crypto import Blake2bEd25519, CryptoBackend
from nano_sdk.encoding import (
    binary_string_to_bytes,
    bytes_to_binary_string,
    bytes_to_hex,
    hex_to_bytes,
    pad_left,
    u32_to_bytes,
)
from nano_sdk.identity import (
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
from nano_sdk.types import (
    ZERO_PREVIOUS,
    AccountBalance,
    AccountInfo,
    AccountPrefix,
    AddressCheckResult,
    AddressKey,
    BlockCount,
    BlockError,
    BlockSubtype,
    IncompleteBlockError,
    InvalidBlockError,
    NanoType,
    NodeVersion,
    PendingBlock,
    RawKey,
    StateBlock,
)
from nano_sdk.wallet import IndexAlreadyExistsError, NanoWallet, WalletError

__all__ = [
    # Encoding
    "BASE32",
    "NanoBase32",
    "binary_string_to_bytes",
    "bytes_to_binary_string",
    "bytes_to_hex",
    "hex_to_bytes",
    "pad_left",
    "u32_to_bytes",
    # Crypto
    "Blake2bEd25519",
    "CryptoBackend",
    # Identity
    "check_address",
    "create_address",
    "create_checksum",
    "decode_public_key",
    "derive_private_key",
    "derive_public_key",
    "encode_public_key",
    "generate_seed",
    "is_valid_address",
    "parse_address",
    "seed_from_message",
    "sign_message",
    "split_address",
    "verify_signature",
    # Accounts
    "NanoAccount",
    "new_account",
    # Amounts
    "Amount",
    # Blocks
    "BlockBuilderError",
    "InsufficientBalanceError",
    "InvalidDestinationError",
    "NoFrontierError",
    "NoRepresentativeError",
    "StateBlockBuilder",
    "build_change_block",
    "build_receive_block",
    "build_send_block",
    "hash_state_block",
    "sign_block",
    "sign_state_block_hash",
    "state_block_preimage",
    "verify_block",
    # Client
    "NanoAccountNotFoundError",
    "NanoClient",
    "NanoClientError",
    "NanoConnectionError",
    "NanoHttpError",
    "NanoRpcError",
    "NanoTimeoutError",
    # Config
    "NanoConfig",
    # Types
    "ZERO_PREVIOUS",
    "AccountBalance",
    "AccountInfo",
    "AccountPrefix",
    "AddressCheckResult",
    "AddressKey",
    "BlockCount",
    "BlockError",
    "BlockSubtype",
    "IncompleteBlockError",
    "InvalidBlockError",
    "NanoType",
    "NodeVersion",
    "PendingBlock",
    "RawKey",
    "StateBlock",
    # Wallet
    "IndexAlreadyExistsError",
    "NanoWallet",
    "WalletError",
]

__version__ = "0.1.0"
