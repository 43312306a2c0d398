"""
Tick scheduler for the ORE automation executor.

Runs one tick immediately, then one every `interval` seconds measured from
tick start to tick start. A tick that fires while the previous one is still
running is skipped, not queued.
"""
import asyncio
import logging
from typing import List, Optional, Set, Tuple

from solders.pubkey import Pubkey

from executor.errors import ExecutorError, LedgerUnavailable, MalformedResponse, UpstreamUnavailable
from executor.models.state import AccountOutcome, ExecutorState, OutcomeStatus, TickReport
from executor.orchestrator.automation import process_automation_account
from executor.services.discovery import AccountDiscovery
from executor.services.round_state import RoundStateService
from executor.services.submitter import Submitter
from executor.services.transactions import TransactionBuilder

logger = logging.getLogger(__name__)


class TickScheduler:
    """Drives the round check, discovery and per-account loop."""

    def __init__(
        self,
        round_state: RoundStateService,
        discovery: AccountDiscovery,
        builder: TransactionBuilder,
        submitter: Submitter,
        executor: Pubkey,
        state: Optional[ExecutorState] = None,
        interval_seconds: float = 2.0,
        dry_run: bool = False,
    ):
        """
        Args:
            round_state: Round state provider
            discovery: Ledger reads (discovery and miner fetch)
            builder: Transaction builder holding the executor keypair
            submitter: Send and confirm
            executor: Executor identity used for discovery and ownership checks
            state: Run-state store; a fresh one is created if None
            interval_seconds: Start-to-start tick interval
            dry_run: Build and sign but do not submit
        """
        self.round_state = round_state
        self.discovery = discovery
        self.builder = builder
        self.submitter = submitter
        self.executor = executor
        self.state = state or ExecutorState()
        self.interval_seconds = interval_seconds
        self.dry_run = dry_run
        self._tasks: Set[asyncio.Task] = set()

    def _claim(self) -> bool:
        if self.state.begin_tick():
            return True
        logger.warning(
            f"Previous tick still running; skipping this tick "
            f"({self.state.ticks_skipped} skipped so far)"
        )
        return False

    async def tick(self) -> Optional[TickReport]:
        """Run one tick now. Returns None if a tick is already in progress."""
        if not self._claim():
            return None
        return await self._run_claimed()

    def trigger(self) -> Optional[asyncio.Task]:
        """Start a tick in the background unless one is already running."""
        if not self._claim():
            return None
        task = asyncio.create_task(
            self._run_claimed(), name=f"tick_{self.state.ticks_started}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run_forever(self) -> None:
        """Tick immediately, then on a fixed start-to-start interval."""
        loop = asyncio.get_running_loop()
        logger.info(f"Scheduler started, ticking every {self.interval_seconds:.3f}s")
        next_start = loop.time()
        try:
            while True:
                self.trigger()
                next_start += self.interval_seconds
                await asyncio.sleep(max(0.0, next_start - loop.time()))
        finally:
            if self._tasks:
                logger.info(f"Waiting for {len(self._tasks)} in-flight tick(s) to finish...")
                await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _run_claimed(self) -> Optional[TickReport]:
        report: Optional[TickReport] = None
        try:
            report = await self._run_tick()
        except Exception as e:
            logger.error(f"Unexpected error in tick: {e}", exc_info=True)
        finally:
            self.state.end_tick(report)
        return report

    async def _run_tick(self) -> TickReport:
        report = TickReport()

        try:
            snapshot = await self.round_state.fetch_round()
        except (UpstreamUnavailable, MalformedResponse) as e:
            logger.error(f"Failed to fetch ORE round state: {e}")
            report.aborted = True
            report.error = f"{type(e).__name__}: {e}"
            return report

        report.round_id = snapshot.round_id
        report.round_status = snapshot.status.value
        if not snapshot.is_active:
            logger.debug(f"Round {snapshot.round_id} is {snapshot.status.value}; nothing to do")
            return report

        try:
            accounts = await self.discovery.find_delegations(self.executor)
        except LedgerUnavailable as e:
            logger.error(f"Failed to discover automation accounts: {e}")
            report.aborted = True
            report.error = f"{type(e).__name__}: {e}"
            return report

        if not accounts:
            return report

        report.outcomes = await self._process_accounts(accounts, snapshot.round_id)
        logger.info(f"Tick complete - {report.summary()}")
        return report

    async def _process_accounts(
        self, accounts: List[Tuple[Pubkey, bytes]], round_id: int
    ) -> List[AccountOutcome]:
        outcomes = []
        for address, data in accounts:
            outcomes.append(await self._process_account(address, data, round_id))
        return outcomes

    async def _process_account(self, address: Pubkey, data: bytes, round_id: int) -> AccountOutcome:
        try:
            return await process_automation_account(
                address,
                data,
                round_id,
                executor=self.executor,
                discovery=self.discovery,
                builder=self.builder,
                submitter=self.submitter,
                dry_run=self.dry_run,
            )
        except ExecutorError as e:
            logger.error(f"Error handling automation account {address}: {type(e).__name__}: {e}")
            reason = f"{type(e).__name__}: {e}"
        except Exception as e:
            logger.error(f"Error handling automation account {address}: {e}", exc_info=True)
            reason = f"{type(e).__name__}: {e}"
        return AccountOutcome(address=str(address), status=OutcomeStatus.ERROR, reason=reason)
