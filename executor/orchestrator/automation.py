"""
Process one automation account: decode, load the miner, decide, build, submit.

Conditions that make an account non-actionable (short data, foreign executor,
missing or mismatched miner record, nothing to do) produce a SKIPPED outcome
with a warning. Ledger and submission errors propagate to the scheduler's
per-account boundary.
"""
from __future__ import annotations

import logging
from typing import Optional

from solders.pubkey import Pubkey

from executor.decision import ActionKind, decide
from executor.models.state import AccountOutcome, OutcomeStatus
from executor.services.discovery import AccountDiscovery
from executor.services.submitter import Submitter
from executor.services.transactions import TransactionBuilder
from protocol.layouts import DecodeError, decode_delegation, decode_mining_record
from protocol.program import miner_pda

logger = logging.getLogger(__name__)


def _skipped(address: Pubkey, reason: str, action: Optional[str] = None) -> AccountOutcome:
    return AccountOutcome(
        address=str(address),
        status=OutcomeStatus.SKIPPED,
        action=action,
        reason=reason,
    )


async def process_automation_account(
    address: Pubkey,
    data: bytes,
    current_round_id: int,
    *,
    executor: Pubkey,
    discovery: AccountDiscovery,
    builder: TransactionBuilder,
    submitter: Submitter,
    dry_run: bool = False,
) -> AccountOutcome:
    """
    Run the full pipeline for a single automation account.

    Returns:
        AccountOutcome describing what was done

    Raises:
        LedgerUnavailable: Miner fetch or blockhash fetch failed
        SubmissionFailed, TransactionExpired: Transaction did not land
    """
    try:
        delegation = decode_delegation(data)
    except DecodeError as e:
        logger.warning(f"Skipping automation {address}: {e}")
        return _skipped(address, str(e))

    if delegation.executor != executor:
        reason = f"executor {delegation.executor} is not {executor}"
        logger.warning(f"Skipping automation {address}: {reason}")
        return _skipped(address, reason)

    authority = delegation.authority
    miner_address = miner_pda(authority)[0]
    miner_data = await discovery.fetch_account(miner_address)
    if miner_data is None:
        reason = "miner account does not exist yet"
        logger.warning(f"Skipping automation {address} for authority {authority}: {reason}")
        return _skipped(address, reason)

    try:
        mining_record = decode_mining_record(miner_data)
    except DecodeError as e:
        logger.warning(f"Skipping automation {address} for authority {authority}: {e}")
        return _skipped(address, str(e))

    if mining_record.authority != authority:
        reason = f"miner {miner_address} belongs to {mining_record.authority}"
        logger.warning(f"Skipping automation {address}: {reason}")
        return _skipped(address, reason)

    action = decide(delegation, mining_record, current_round_id)
    if action.is_skip:
        logger.info(
            f"Skipped automation {address} for authority {authority}: "
            f"balance {delegation.balance} < {delegation.required_balance}, "
            f"checkpoint up to date (round {mining_record.round_id})"
        )
        return _skipped(address, "insufficient balance, nothing to checkpoint", action.kind.value)

    prepared = await builder.build(action, delegation)

    if dry_run:
        logger.info(
            f"[dry-run] Would {action.describe()} for authority {authority} "
            f"via automation {address}. Tx: {prepared.signature}"
        )
        return AccountOutcome(
            address=str(address),
            status=OutcomeStatus.DRY_RUN,
            action=action.kind.value,
            signature=str(prepared.signature),
        )

    signature = await submitter.submit(prepared)

    if action.kind is ActionKind.CHECKPOINT_ONLY:
        status = OutcomeStatus.CHECKPOINTED
        logger.info(
            f"Final checkpoint for authority {authority} via automation {address} "
            f"on round {action.checkpoint_round_id}. Tx: {signature}"
        )
    else:
        status = OutcomeStatus.DEPLOYED
        logger.info(
            f"Deployed automation for authority {authority} via automation {address} "
            f"on round {action.deploy_round_id} ({action.describe()}). Tx: {signature}"
        )

    return AccountOutcome(
        address=str(address),
        status=status,
        action=action.kind.value,
        signature=str(signature),
    )
