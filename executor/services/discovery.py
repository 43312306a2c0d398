"""
Account discovery for the ORE automation executor.

Finds every Automation account whose `executor` field equals this process's
identity, using a server-side memcmp filter, and fetches single accounts
(the delegator's Miner record) on demand.
"""
import logging
from typing import List, Optional, Tuple

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException
from solana.rpc.types import MemcmpOpts
from solders.pubkey import Pubkey
from solders.rpc.responses import GetAccountInfoResp, GetProgramAccountsResp

from executor.errors import LedgerUnavailable
from protocol.layouts import DELEGATION_EXECUTOR_OFFSET
from protocol.program import ORE_PROGRAM_ID

logger = logging.getLogger(__name__)

_RPC_ERRORS = (SolanaRpcException, RPCException, OSError)


class AccountDiscovery:
    """Ledger reads needed by a tick."""

    def __init__(
        self,
        client: AsyncClient,
        program_id: Pubkey = ORE_PROGRAM_ID,
        commitment: Commitment = Confirmed,
    ):
        self.client = client
        self.program_id = program_id
        self.commitment = commitment

    async def find_delegations(self, executor: Pubkey) -> List[Tuple[Pubkey, bytes]]:
        """
        List Automation accounts naming `executor` as their executor.

        Returns:
            (address, raw account data) pairs in ledger order; empty if none

        Raises:
            LedgerUnavailable: On RPC failure
        """
        filters = [MemcmpOpts(offset=DELEGATION_EXECUTOR_OFFSET, bytes=str(executor))]
        try:
            resp = await self.client.get_program_accounts(
                self.program_id,
                commitment=self.commitment,
                encoding="base64",
                filters=filters,
            )
        except _RPC_ERRORS as e:
            raise LedgerUnavailable(f"getProgramAccounts failed: {e}") from e

        if not isinstance(resp, GetProgramAccountsResp):
            raise LedgerUnavailable(f"getProgramAccounts returned an error: {resp}")

        accounts = [(keyed.pubkey, bytes(keyed.account.data)) for keyed in resp.value]
        logger.debug(f"Discovered {len(accounts)} automation account(s) for {executor}")
        return accounts

    async def fetch_account(self, address: Pubkey) -> Optional[bytes]:
        """
        Fetch a single account's data.

        Returns:
            Raw account data, or None if the account does not exist

        Raises:
            LedgerUnavailable: On RPC failure
        """
        try:
            resp = await self.client.get_account_info(
                address, commitment=self.commitment, encoding="base64"
            )
        except _RPC_ERRORS as e:
            raise LedgerUnavailable(f"getAccountInfo({address}) failed: {e}") from e

        if not isinstance(resp, GetAccountInfoResp):
            raise LedgerUnavailable(f"getAccountInfo({address}) returned an error: {resp}")

        if resp.value is None:
            return None
        return bytes(resp.value.data)
