"""
On-chain data models for the ORE automation executor.

These mirror the accounts owned by the ORE program plus the round snapshot
returned by the round state API. All models are immutable; every tick
re-reads them from the ledger.
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from solders.pubkey import Pubkey

SQUARE_COUNT = 25


class RoundStatus(str, Enum):
    """Lifecycle status of a mining round."""
    IDLE = "idle"
    ACTIVE = "active"
    FINISHED = "finished"
    EXPIRED = "expired"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> "RoundStatus":
        """Map a raw status string to a RoundStatus, UNKNOWN if unrecognized."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class RoundSnapshot(BaseModel):
    """Current mining round as reported by the round state API."""
    model_config = ConfigDict(frozen=True)

    round_id: int = Field(..., ge=0, description="Current round identifier")
    status: RoundStatus = Field(..., description="Mining lifecycle status")

    @property
    def is_active(self) -> bool:
        return self.status is RoundStatus.ACTIVE


class DelegationRecord(BaseModel):
    """
    Automation account authorizing an executor to deploy on behalf of a delegator.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    amount: int = Field(..., ge=0, description="Lamports deployed per triggered round")
    authority: Pubkey = Field(..., description="Delegator the executor acts for")
    balance: int = Field(..., ge=0, description="Escrowed lamports available")
    executor: Pubkey = Field(..., description="Identity allowed to submit actions")
    fee: int = Field(..., ge=0, description="Per-trigger executor fee in lamports")
    strategy: int = Field(0, ge=0, description="Selection strategy (not applied)")
    mask: int = Field(0, ge=0, description="Selection mask (not applied)")

    @property
    def required_balance(self) -> int:
        return self.amount + self.fee

    @property
    def can_deploy(self) -> bool:
        """True if the escrow covers one more deploy plus its fee."""
        return self.balance >= self.required_balance


class MiningRecord(BaseModel):
    """
    Per-delegator Miner account tracking round participation and rewards.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    authority: Pubkey
    deployed: List[int] = Field(..., min_length=SQUARE_COUNT, max_length=SQUARE_COUNT)
    cumulative: List[int] = Field(..., min_length=SQUARE_COUNT, max_length=SQUARE_COUNT)
    checkpoint_fee: int = 0
    checkpoint_id: int = Field(..., description="Round whose rewards were last realized")
    last_claim_ore_at: int = 0
    last_claim_sol_at: int = 0
    rewards_factor: bytes = Field(b"\x00" * 16, description="Opaque fixed-point accumulator")
    rewards_sol: int = 0
    rewards_ore: int = 0
    refined_ore: int = 0
    round_id: int = Field(..., description="Round the record is associated with")

    @property
    def needs_checkpoint(self) -> bool:
        """Rewards for round_id are not yet realized."""
        return self.checkpoint_id != self.round_id
