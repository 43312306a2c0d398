"""
Run state and outcome models for the executor.

ExecutorState is created once at startup and passed to the scheduler. It holds
no decision inputs: those are re-read from the ledger every tick.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class OutcomeStatus(str, Enum):
    DEPLOYED = "deployed"
    CHECKPOINTED = "checkpointed"
    SKIPPED = "skipped"
    DRY_RUN = "dry_run"
    ERROR = "error"


class AccountOutcome(BaseModel):
    """What happened to one automation account in one tick."""
    address: str = Field(..., description="Automation account address")
    status: OutcomeStatus
    action: Optional[str] = Field(None, description="Decided action kind")
    signature: Optional[str] = Field(None, description="Submitted transaction signature")
    reason: Optional[str] = Field(None, description="Why the account was skipped or failed")


class TickReport(BaseModel):
    """Summary of a single tick."""
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    round_id: Optional[int] = None
    round_status: Optional[str] = None
    aborted: bool = False
    error: Optional[str] = None
    outcomes: List[AccountOutcome] = Field(default_factory=list)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    def summary(self) -> str:
        if self.aborted:
            return f"aborted: {self.error}"
        if not self.outcomes:
            return f"round {self.round_id} ({self.round_status}): no accounts processed"
        parts = [
            f"{status.value}={self.count(status)}"
            for status in OutcomeStatus
            if self.count(status)
        ]
        return f"round {self.round_id}: {len(self.outcomes)} account(s), " + ", ".join(parts)


class ExecutorState:
    """
    Process-lifetime bookkeeping shared by the scheduler.

    The tick_in_progress flag is the overlap guard: a tick fired while it is
    set is skipped rather than queued.
    """

    def __init__(self):
        self.tick_in_progress = False
        self.ticks_started = 0
        self.ticks_completed = 0
        self.ticks_aborted = 0
        self.ticks_skipped = 0
        self.last_report: Optional[TickReport] = None
        self.last_outcomes: Dict[str, AccountOutcome] = {}

    def begin_tick(self) -> bool:
        """Claim the tick slot. False if a tick is already running."""
        if self.tick_in_progress:
            self.ticks_skipped += 1
            return False
        self.tick_in_progress = True
        self.ticks_started += 1
        return True

    def end_tick(self, report: Optional[TickReport]) -> None:
        self.tick_in_progress = False
        if report is None:
            self.ticks_aborted += 1
            return
        self.last_report = report
        if report.aborted:
            self.ticks_aborted += 1
        else:
            self.ticks_completed += 1
        for outcome in report.outcomes:
            self.last_outcomes[outcome.address] = outcome

    def summary(self) -> str:
        """Tick counters plus the latest outcome of every account seen."""
        counts: Dict[str, int] = {}
        for outcome in self.last_outcomes.values():
            counts[outcome.status.value] = counts.get(outcome.status.value, 0) + 1

        text = (
            f"ticks started={self.ticks_started} completed={self.ticks_completed} "
            f"aborted={self.ticks_aborted} skipped={self.ticks_skipped}"
        )
        if self.last_report is not None and self.last_report.round_id is not None:
            text += f", last round {self.last_report.round_id}"
        if counts:
            text += f", {len(self.last_outcomes)} account(s): " + ", ".join(
                f"{status}={count}" for status, count in sorted(counts.items())
            )
        return text
