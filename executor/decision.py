"""
Decision engine: what to submit for one automation account this tick.

A pure function of the delegation, the delegator's mining record and the
current round id. Checkpointing always targets the round the mining record
still references; deploying always targets the current round.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from protocol.models import SQUARE_COUNT, DelegationRecord, MiningRecord


class ActionKind(str, Enum):
    SKIP = "skip"
    CHECKPOINT_ONLY = "checkpoint_only"
    CHECKPOINT_THEN_DEPLOY = "checkpoint_then_deploy"
    DEPLOY_ONLY = "deploy_only"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    checkpoint_round_id: Optional[int] = None
    deploy_round_id: Optional[int] = None

    @classmethod
    def skip(cls) -> "Action":
        return cls(ActionKind.SKIP)

    @classmethod
    def checkpoint_only(cls, checkpoint_round_id: int) -> "Action":
        return cls(ActionKind.CHECKPOINT_ONLY, checkpoint_round_id=checkpoint_round_id)

    @classmethod
    def checkpoint_then_deploy(cls, checkpoint_round_id: int, deploy_round_id: int) -> "Action":
        return cls(
            ActionKind.CHECKPOINT_THEN_DEPLOY,
            checkpoint_round_id=checkpoint_round_id,
            deploy_round_id=deploy_round_id,
        )

    @classmethod
    def deploy_only(cls, deploy_round_id: int) -> "Action":
        return cls(ActionKind.DEPLOY_ONLY, deploy_round_id=deploy_round_id)

    @property
    def has_checkpoint(self) -> bool:
        return self.checkpoint_round_id is not None

    @property
    def has_deploy(self) -> bool:
        return self.deploy_round_id is not None

    @property
    def is_skip(self) -> bool:
        return self.kind is ActionKind.SKIP

    def describe(self) -> str:
        if self.kind is ActionKind.CHECKPOINT_ONLY:
            return f"checkpoint round {self.checkpoint_round_id}"
        if self.kind is ActionKind.CHECKPOINT_THEN_DEPLOY:
            return (
                f"checkpoint round {self.checkpoint_round_id}, "
                f"deploy round {self.deploy_round_id}"
            )
        if self.kind is ActionKind.DEPLOY_ONLY:
            return f"deploy round {self.deploy_round_id}"
        return "skip"


def decide(
    delegation: DelegationRecord,
    mining_record: MiningRecord,
    current_round_id: int,
) -> Action:
    """
    Pick the action for one account.

    | can_deploy | needs_checkpoint | action                                  |
    |------------|------------------|-----------------------------------------|
    | no         | yes              | CheckpointOnly(record.round_id)         |
    | no         | no               | Skip                                    |
    | yes        | yes              | CheckpointThenDeploy(record.round_id, current) |
    | yes        | no               | DeployOnly(current)                     |
    """
    needs_checkpoint = mining_record.needs_checkpoint
    can_deploy = delegation.can_deploy

    if not can_deploy:
        if needs_checkpoint:
            return Action.checkpoint_only(mining_record.round_id)
        return Action.skip()

    if needs_checkpoint:
        return Action.checkpoint_then_deploy(mining_record.round_id, current_round_id)
    return Action.deploy_only(current_round_id)


def select_squares(delegation: DelegationRecord) -> List[bool]:
    """
    Squares a deploy targets for this delegation.

    The delegation's strategy and mask are decoded but not applied; every
    square is selected.
    """
    return [True] * SQUARE_COUNT
