"""
Exception taxonomy for the executor.

Tick-level errors (UpstreamUnavailable, MalformedResponse, LedgerUnavailable)
abort the current tick only. Account-level errors (SubmissionFailed,
TransactionExpired, and protocol.layouts.DecodeError) are caught per account.
SigningUnavailable is fatal at startup.
"""


class ExecutorError(Exception):
    """Base class for executor errors."""


class UpstreamUnavailable(ExecutorError):
    """Round state API unreachable or returned a non-success status."""


class MalformedResponse(ExecutorError):
    """Round state API response is missing the round id or status."""


class LedgerUnavailable(ExecutorError):
    """Ledger RPC call failed."""


class SigningUnavailable(ExecutorError):
    """Executor key material is missing or cannot be loaded."""


class SubmissionFailed(ExecutorError):
    """Transaction could not be sent or was rejected by the ledger."""


class TransactionExpired(ExecutorError):
    """Blockhash validity window elapsed before the transaction confirmed."""

    def __init__(self, signature, last_valid_block_height: int):
        self.signature = signature
        self.last_valid_block_height = last_valid_block_height
        super().__init__(
            f"Transaction {signature} not confirmed before block height "
            f"{last_valid_block_height}"
        )
