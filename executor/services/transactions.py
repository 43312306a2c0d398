"""
Transaction builder.

Turns a decided Action into a signed legacy transaction: instructions in
checkpoint-then-deploy order, a fresh recent blockhash, and the executor as
fee payer and sole signer.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.rpc.responses import GetLatestBlockhashResp
from solders.signature import Signature
from solders.transaction import Transaction

from executor.decision import Action, select_squares
from executor.errors import LedgerUnavailable
from protocol.models import DelegationRecord
from protocol.program import checkpoint_instruction, deploy_instruction

logger = logging.getLogger(__name__)

SquareSelector = Callable[[DelegationRecord], Sequence[bool]]


@dataclass(frozen=True)
class PreparedTransaction:
    """A signed transaction plus the blockhash window it is valid for."""
    transaction: Transaction
    action: Action
    blockhash: Hash
    last_valid_block_height: int

    @property
    def signature(self) -> Signature:
        return self.transaction.signatures[0]

    def serialize(self) -> bytes:
        return bytes(self.transaction)


class TransactionBuilder:
    """Builds and signs executor transactions."""

    def __init__(
        self,
        client: AsyncClient,
        keypair: Keypair,
        commitment: Commitment = Confirmed,
        square_selector: Optional[SquareSelector] = None,
    ):
        self.client = client
        self.keypair = keypair
        self.commitment = commitment
        self.square_selector = square_selector or select_squares

    @property
    def signer(self):
        return self.keypair.pubkey()

    def instructions_for(self, action: Action, delegation: DelegationRecord) -> List[Instruction]:
        """
        Instructions for an action, checkpoint first.

        Returns an empty list for Skip.
        """
        instructions: List[Instruction] = []
        if action.has_checkpoint:
            instructions.append(
                checkpoint_instruction(
                    signer=self.signer,
                    authority=delegation.authority,
                    round_id=action.checkpoint_round_id,
                )
            )
        if action.has_deploy:
            instructions.append(
                deploy_instruction(
                    signer=self.signer,
                    authority=delegation.authority,
                    amount=delegation.amount,
                    round_id=action.deploy_round_id,
                    squares=self.square_selector(delegation),
                )
            )
        return instructions

    async def latest_blockhash(self):
        """
        Fetch a recent blockhash and its last valid block height.

        Raises:
            LedgerUnavailable: On RPC failure
        """
        try:
            resp = await self.client.get_latest_blockhash(self.commitment)
        except (SolanaRpcException, RPCException, OSError) as e:
            raise LedgerUnavailable(f"getLatestBlockhash failed: {e}") from e
        if not isinstance(resp, GetLatestBlockhashResp):
            raise LedgerUnavailable(f"getLatestBlockhash returned an error: {resp}")
        return resp.value.blockhash, resp.value.last_valid_block_height

    async def build(self, action: Action, delegation: DelegationRecord) -> PreparedTransaction:
        """
        Build and sign the transaction for an action.

        Raises:
            ValueError: If the action is Skip
            LedgerUnavailable: If no blockhash could be fetched
        """
        instructions = self.instructions_for(action, delegation)
        if not instructions:
            raise ValueError("Nothing to build for a skip action")

        blockhash, last_valid_block_height = await self.latest_blockhash()
        message = Message.new_with_blockhash(instructions, self.signer, blockhash)
        transaction = Transaction([self.keypair], message, blockhash)

        logger.debug(
            f"Built {len(instructions)} instruction(s) for {delegation.authority} "
            f"({action.describe()}), valid until height {last_valid_block_height}"
        )
        return PreparedTransaction(
            transaction=transaction,
            action=action,
            blockhash=blockhash,
            last_valid_block_height=last_valid_block_height,
        )
