"""
Submission and confirmation of signed executor transactions.
"""
import asyncio
import logging

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException, TransactionExpiredBlockheightExceededError
from solana.rpc.types import TxOpts
from solders.signature import Signature

from executor.errors import SubmissionFailed, TransactionExpired
from executor.services.transactions import PreparedTransaction

logger = logging.getLogger(__name__)


class Submitter:
    """
    Sends a signed transaction and waits for it to confirm.

    Transport failures while sending are retried up to `max_retries` times;
    the same value is passed to the RPC node as its rebroadcast limit. A signed
    transaction has a fixed signature, so resending it cannot double-apply.
    """

    def __init__(
        self,
        client: AsyncClient,
        commitment: Commitment = Confirmed,
        max_retries: int = 3,
        skip_preflight: bool = False,
        poll_seconds: float = 0.5,
        retry_delay: float = 0.5,
    ):
        self.client = client
        self.commitment = commitment
        self.max_retries = max_retries
        self.skip_preflight = skip_preflight
        self.poll_seconds = poll_seconds
        self.retry_delay = retry_delay

    async def submit(self, prepared: PreparedTransaction) -> Signature:
        """
        Send and confirm a prepared transaction.

        Returns:
            The confirmed transaction signature

        Raises:
            SubmissionFailed: Send failed, was rejected, or the transaction errored
            TransactionExpired: Not confirmed before the blockhash expired
        """
        signature = await self._send(prepared)
        await self._confirm(signature, prepared.last_valid_block_height)
        return signature

    async def _send(self, prepared: PreparedTransaction) -> Signature:
        opts = TxOpts(
            skip_preflight=self.skip_preflight,
            preflight_commitment=self.commitment,
            max_retries=self.max_retries,
        )
        raw = prepared.serialize()

        attempt = 0
        while True:
            try:
                resp = await self.client.send_raw_transaction(raw, opts=opts)
                return resp.value
            except RPCException as e:
                raise SubmissionFailed(f"Transaction rejected: {e}") from e
            except (SolanaRpcException, OSError) as e:
                attempt += 1
                if attempt > self.max_retries:
                    raise SubmissionFailed(
                        f"Send failed after {attempt} attempt(s): {e}"
                    ) from e
                logger.warning(
                    f"Send attempt {attempt} for {prepared.signature} failed: {e}; retrying"
                )
                await asyncio.sleep(self.retry_delay)

    async def _confirm(self, signature: Signature, last_valid_block_height: int) -> None:
        try:
            resp = await self.client.confirm_transaction(
                signature,
                self.commitment,
                sleep_seconds=self.poll_seconds,
                last_valid_block_height=last_valid_block_height,
            )
        except TransactionExpiredBlockheightExceededError as e:
            raise TransactionExpired(signature, last_valid_block_height) from e
        except (SolanaRpcException, RPCException, OSError) as e:
            raise SubmissionFailed(f"Confirmation of {signature} failed: {e}") from e

        statuses = getattr(resp, "value", None) or []
        status = statuses[0] if statuses else None
        if status is not None and status.err is not None:
            raise SubmissionFailed(f"Transaction {signature} failed: {status.err}")
