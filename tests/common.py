"""
Shared test helpers and utilities for project-wide use.

Use these from conftest.py fixtures or individual tests.
"""
from __future__ import annotations

import struct
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from unittest.mock import AsyncMock, MagicMock

from solana.exceptions import SolanaRpcException
from solders.account import Account
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.rpc.responses import (
    GetAccountInfoResp,
    GetLatestBlockhashResp,
    GetProgramAccountsResp,
    RpcBlockhash,
    RpcKeyedAccount,
    RpcResponseContext,
    SendTransactionResp,
)
from solders.signature import Signature


# Ensure project root is on path when tests run
def _ensure_project_root() -> Path:
    root = Path(__file__).resolve().parent.parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    return root


def ensure_project_root() -> Path:
    """Add project root to sys.path. Idempotent. Returns root Path."""
    return _ensure_project_root()


ensure_project_root()

from protocol.program import ORE_PROGRAM_ID  # noqa: E402

LAMPORTS_PER_SOL = 1_000_000_000
DELEGATION_HEADER = bytes(range(8))
MINER_HEADER = bytes(range(100, 108))


def build_delegation_bytes(
    *,
    authority: Pubkey,
    executor: Pubkey,
    amount: int = LAMPORTS_PER_SOL,
    balance: int = 2 * LAMPORTS_PER_SOL,
    fee: int = 5_000,
    strategy: int = 0,
    mask: int = 0,
) -> bytes:
    """Serialize an Automation account (112 bytes)."""
    return (
        DELEGATION_HEADER
        + struct.pack("<Q", amount)
        + bytes(authority)
        + struct.pack("<Q", balance)
        + bytes(executor)
        + struct.pack("<QQQ", fee, strategy, mask)
    )


def build_mining_record_bytes(
    *,
    authority: Pubkey,
    checkpoint_id: int,
    round_id: int,
    deployed: Optional[Sequence[int]] = None,
    cumulative: Optional[Sequence[int]] = None,
    checkpoint_fee: int = 0,
    last_claim_ore_at: int = 0,
    last_claim_sol_at: int = 0,
    rewards_factor: bytes = b"\x00" * 16,
    rewards_sol: int = 0,
    rewards_ore: int = 0,
    refined_ore: int = 0,
    padding: int = 16,
) -> bytes:
    """Serialize a Miner account (520 bytes of fields plus padding)."""
    deployed = list(deployed) if deployed is not None else [0] * 25
    cumulative = list(cumulative) if cumulative is not None else [0] * 25
    return (
        MINER_HEADER
        + bytes(authority)
        + struct.pack("<25Q", *deployed)
        + struct.pack("<25Q", *cumulative)
        + struct.pack("<QQqq", checkpoint_fee, checkpoint_id, last_claim_ore_at, last_claim_sol_at)
        + rewards_factor
        + struct.pack("<QQQQ", rewards_sol, rewards_ore, refined_ore, round_id)
        + b"\x00" * padding
    )


def rpc_transport_error(message: str) -> SolanaRpcException:
    """A SolanaRpcException as raised by solana-py when the HTTP request fails."""
    return SolanaRpcException(OSError(message), lambda: None, None, object())


def program_accounts_resp(accounts: List[Tuple[Pubkey, bytes]]) -> GetProgramAccountsResp:
    return GetProgramAccountsResp(
        [
            RpcKeyedAccount(pubkey, Account(1_000_000, data, ORE_PROGRAM_ID))
            for pubkey, data in accounts
        ]
    )


def account_info_resp(data: Optional[bytes]) -> GetAccountInfoResp:
    account = Account(1_000_000, data, ORE_PROGRAM_ID) if data is not None else None
    return GetAccountInfoResp(account, RpcResponseContext(slot=1))


def latest_blockhash_resp(
    blockhash: Optional[Hash] = None, last_valid_block_height: int = 1_000
) -> GetLatestBlockhashResp:
    return GetLatestBlockhashResp(
        RpcBlockhash(blockhash or Hash.new_unique(), last_valid_block_height),
        RpcResponseContext(slot=1),
    )


def build_mock_ledger_client(
    accounts: Optional[List[Tuple[Pubkey, bytes]]] = None,
    miners: Optional[dict] = None,
) -> MagicMock:
    """
    MagicMock standing in for solana.rpc.async_api.AsyncClient.

    Args:
        accounts: (address, data) pairs returned by get_program_accounts
        miners: Pubkey -> bytes returned by get_account_info (missing -> None)
    """
    miners = miners or {}
    client = MagicMock()
    client.get_program_accounts = AsyncMock(return_value=program_accounts_resp(accounts or []))
    client.get_account_info = AsyncMock(
        side_effect=lambda address, **kwargs: account_info_resp(miners.get(address))
    )
    client.get_latest_blockhash = AsyncMock(return_value=latest_blockhash_resp())
    client.send_raw_transaction = AsyncMock(
        side_effect=lambda raw, opts=None: SendTransactionResp(Signature.from_bytes(raw[1:65]))
    )
    client.confirm_transaction = AsyncMock(return_value=MagicMock(value=[MagicMock(err=None)]))
    return client
